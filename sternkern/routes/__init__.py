# Register all blueprints here
def register_blueprints(app):
    from .auth import auth_bp
    from .units import units_bp
    from .tenants import tenants_bp
    from .invoices import invoices_bp
    from .payments import payments_bp
    from .records import records_bp
    from .reports import reports_bp
    from .admin import admin_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(units_bp)
    app.register_blueprint(tenants_bp)
    app.register_blueprint(invoices_bp)
    app.register_blueprint(payments_bp)
    app.register_blueprint(records_bp)
    app.register_blueprint(reports_bp)
    app.register_blueprint(admin_bp)
