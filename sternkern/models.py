# sternkern/models.py
from . import db
from datetime import date

MONEY = db.Numeric(12, 2)


def _iso(value):
    return value.isoformat() if value else None


class Unit(db.Model):
    __tablename__ = 'units'
    id = db.Column(db.Integer, primary_key=True)
    house_number = db.Column(db.String(20), unique=True, nullable=False)
    bedrooms = db.Column(db.Integer, nullable=False, default=1)
    rent_amount = db.Column(MONEY, nullable=False, default=0)
    occupancy_status = db.Column(db.String(20), nullable=False, default='Unoccupied')

    def to_dict(self):
        return {
            'id': self.id,
            'house_number': self.house_number,
            'bedrooms': self.bedrooms,
            'rent_amount': self.rent_amount,
            'occupancy_status': self.occupancy_status
        }


class Tenant(db.Model):
    __tablename__ = 'tenants'
    id = db.Column(db.Integer, primary_key=True)
    tenant_name = db.Column(db.String(100), nullable=False)
    contact_number = db.Column(db.String(30))
    email = db.Column(db.String(120))
    house_number = db.Column(db.String(20), nullable=True, index=True)
    # Legacy cached column; balances are always recomputed from invoices and payments
    arrears = db.Column(MONEY, nullable=True, default=0)

    def to_dict(self):
        return {
            'id': self.id,
            'tenant_name': self.tenant_name,
            'contact_number': self.contact_number,
            'email': self.email,
            'house_number': self.house_number
        }


class Invoice(db.Model):
    __tablename__ = 'invoices'
    __table_args__ = (
        db.UniqueConstraint('house_number', 'billing_month', name='uq_invoice_house_month'),
    )
    id = db.Column(db.Integer, primary_key=True)
    invoice_id = db.Column(db.String(40), index=True)
    house_number = db.Column(db.String(20), nullable=False, index=True)
    tenant_name = db.Column(db.String(100))
    billing_month = db.Column(db.Date, nullable=False)
    rent_amount = db.Column(MONEY, nullable=False, default=0)
    electricity = db.Column(MONEY, nullable=False, default=0)
    water = db.Column(MONEY, nullable=False, default=0)
    garbage = db.Column(MONEY, nullable=False, default=0)
    other_utilities = db.Column(MONEY, nullable=False, default=0)
    total_due = db.Column(MONEY, nullable=False, default=0)
    amount_due = db.Column(MONEY, nullable=False, default=0)
    payment_status = db.Column(db.String(20), nullable=False, default='Unpaid')
    date_generated = db.Column(db.Date, nullable=False, default=date.today)

    def to_dict(self):
        return {
            'id': self.id,
            'invoice_id': self.invoice_id,
            'house_number': self.house_number,
            'tenant_name': self.tenant_name,
            'billing_month': _iso(self.billing_month),
            'rent_amount': self.rent_amount,
            'electricity': self.electricity,
            'water': self.water,
            'garbage': self.garbage,
            'other_utilities': self.other_utilities,
            'total_due': self.total_due,
            'amount_due': self.amount_due,
            'payment_status': self.payment_status,
            'date_generated': _iso(self.date_generated)
        }


class Payment(db.Model):
    """Append-only record of money received."""
    __tablename__ = 'payments'
    id = db.Column(db.Integer, primary_key=True)
    tenant_name = db.Column(db.String(100))
    house_number = db.Column(db.String(20), nullable=False, index=True)
    amount_paid = db.Column(MONEY, nullable=False)
    payment_method = db.Column(db.String(20), nullable=False)
    invoice_id = db.Column(db.String(40), nullable=True)
    payment_date = db.Column(db.Date, nullable=False, default=date.today)

    def to_dict(self):
        return {
            'id': self.id,
            'tenant_name': self.tenant_name,
            'house_number': self.house_number,
            'amount_paid': self.amount_paid,
            'payment_method': self.payment_method,
            'invoice_id': self.invoice_id,
            'payment_date': _iso(self.payment_date)
        }


class Maintenance(db.Model):
    __tablename__ = 'maintenance'
    id = db.Column(db.Integer, primary_key=True)
    house_number = db.Column(db.String(20), nullable=False)
    description = db.Column(db.Text, nullable=False)
    status = db.Column(db.String(20), nullable=False, default='Pending')
    contractor_name = db.Column(db.String(100))
    cost = db.Column(MONEY, nullable=False, default=0)
    date_of_maintenance = db.Column(db.Date, nullable=False, default=date.today)

    def to_dict(self):
        return {
            'id': self.id,
            'house_number': self.house_number,
            'description': self.description,
            'status': self.status,
            'contractor_name': self.contractor_name,
            'cost': self.cost,
            'date_of_maintenance': _iso(self.date_of_maintenance)
        }


class Utility(db.Model):
    __tablename__ = 'utilities'
    id = db.Column(db.Integer, primary_key=True)
    house_number = db.Column(db.String(20), nullable=False)
    tenant_name = db.Column(db.String(100))
    electricity = db.Column(MONEY, nullable=False, default=0)
    water = db.Column(MONEY, nullable=False, default=0)
    garbage = db.Column(MONEY, nullable=False, default=0)
    other_utilities = db.Column(MONEY, nullable=False, default=0)
    billing_month = db.Column(db.Date, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'house_number': self.house_number,
            'tenant_name': self.tenant_name,
            'electricity': self.electricity,
            'water': self.water,
            'garbage': self.garbage,
            'other_utilities': self.other_utilities,
            'billing_month': _iso(self.billing_month)
        }


class InventoryItem(db.Model):
    __tablename__ = 'inventory'
    id = db.Column(db.Integer, primary_key=True)
    item_name = db.Column(db.String(100), nullable=False)
    item_category = db.Column(db.String(50))
    house_number = db.Column(db.String(20))
    quantity = db.Column(db.Integer, nullable=False, default=1)
    condition = db.Column(db.String(30))
    purchase_date = db.Column(db.Date)
    purchase_price = db.Column(MONEY)
    warranty_expiry = db.Column(db.Date)
    notes = db.Column(db.Text)

    def to_dict(self):
        return {
            'id': self.id,
            'item_name': self.item_name,
            'item_category': self.item_category,
            'house_number': self.house_number,
            'quantity': self.quantity,
            'condition': self.condition,
            'purchase_date': _iso(self.purchase_date),
            'purchase_price': self.purchase_price,
            'warranty_expiry': _iso(self.warranty_expiry),
            'notes': self.notes
        }


class User(db.Model):
    __tablename__ = 'users'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    # werkzeug password hash, never the plaintext
    password = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), nullable=False, default='tenant')
    contact = db.Column(db.String(30))
    # tenant accounts only: the unit whose records the user may see
    house_number = db.Column(db.String(20))

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'role': self.role,
            'contact': self.contact,
            'house_number': self.house_number
        }
