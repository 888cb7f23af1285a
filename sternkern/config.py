import os
# Define the base directory for the database file (the project root)
BASEDIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
DB_PATH = os.path.join(BASEDIR, 'sternkern.db')


class BillingConfig:
    CURRENCY = os.environ.get('BILLING_CURRENCY', 'KSh')
    PAYMENT_METHODS = ('M-Pesa', 'Bank Transfer', 'Cash', 'Check')
    PAYMENT_STATUSES = ('Unpaid', 'Paid', 'Overdue')
    OCCUPANCY_STATUSES = ('Occupied', 'Unoccupied', 'Under Maintenance')
    MAINTENANCE_STATUSES = ('Pending', 'In Progress', 'Completed')
    # Placeholder rendered for tenant fields when a unit has no tenant row
    MISSING_FIELD = os.environ.get('BILLING_MISSING_FIELD', '—')
    HOUSE_NUMBER_MAX_LENGTH = int(os.environ.get('HOUSE_NUMBER_MAX_LENGTH', 20))


class Config:
    """Base configuration class."""
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///' + DB_PATH
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Secret Key signs the session cookie holding the logged-in user
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'a-very-secret-and-hard-to-guess-string'
    SESSION_USER_KEY = 'sternkern-user'
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')


class TestingConfig(Config):
    """Configuration used specifically for running Pytest."""
    TESTING = True
    # In-memory SQLite keeps every test isolated
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ECHO = False
    LOG_LEVEL = 'WARNING'
