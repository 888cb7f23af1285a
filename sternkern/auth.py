# sternkern/auth.py
"""
Login session and role-based access.

The logged-in user lives in the signed session cookie under a fixed key.
login() creates it, logout() removes it and current_session() rehydrates it
once per request. What each role may reach is decided by ROLE_CAPABILITIES
and checked only at the route boundary through require_capability. Tenant
accounts are further limited to the records of their own unit.
"""
import logging
from dataclasses import dataclass, asdict
from functools import wraps

from flask import abort, current_app, g, session
from sqlalchemy import false
from werkzeug.security import check_password_hash, generate_password_hash

from .errors import ConflictError, ValidationError
from .models import User
from .store import get_store

logger = logging.getLogger(__name__)

ROLES = ('landlord', 'caretaker', 'tenant')

ROLE_CAPABILITIES = {
    'landlord': frozenset({
        'dashboard', 'units', 'tenants', 'inventory', 'invoices', 'utilities',
        'maintenance', 'payments', 'reports', 'settings',
    }),
    'caretaker': frozenset({
        'dashboard', 'units', 'tenants', 'inventory', 'invoices', 'utilities',
        'maintenance', 'payments',
    }),
    'tenant': frozenset({'dashboard', 'invoices', 'maintenance', 'payments'}),
}

_MISSING = object()


@dataclass(frozen=True)
class UserSession:
    id: int
    username: str
    role: str
    contact: str = None
    house_number: str = None

    def can(self, capability):
        return capability in ROLE_CAPABILITIES.get(self.role, frozenset())

    @property
    def house_scoped(self):
        return self.role == 'tenant'

    def may_access_house(self, house_number):
        return not self.house_scoped or (self.house_number is not None and house_number == self.house_number)

    def to_dict(self):
        return asdict(self)


def _session_key():
    return current_app.config.get('SESSION_USER_KEY', 'sternkern-user')


def login(username, password):
    """Check credentials and start a session. Returns None on bad credentials."""
    user = User.query.filter_by(username=username).first()
    if not user or not check_password_hash(user.password, password or ''):
        logger.info("Failed login for %r", username)
        return None
    user_session = UserSession(id=user.id, username=user.username, role=user.role,
                               contact=user.contact, house_number=user.house_number)
    session[_session_key()] = user_session.to_dict()
    g.user_session = user_session
    logger.info("User %s logged in as %s", user.username, user.role)
    return user_session


def logout():
    session.pop(_session_key(), None)
    g.user_session = None


def current_session():
    cached = g.get('user_session', _MISSING)
    if cached is not _MISSING:
        return cached
    stored = session.get(_session_key())
    user_session = None
    if stored:
        try:
            user_session = UserSession(**stored)
        except TypeError:
            logger.warning("Discarding malformed session payload")
            session.pop(_session_key(), None)
    g.user_session = user_session
    return user_session


def require_capability(capability):
    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            user_session = current_session()
            if user_session is None:
                abort(401)
            if not user_session.can(capability):
                abort(403)
            return view(*args, **kwargs)
        return wrapped
    return decorator


def scope_to_house(query, model):
    """Limit a listing to the logged-in tenant's own unit. Staff see every house."""
    user_session = current_session()
    if user_session is not None and user_session.house_scoped:
        if user_session.house_number is None:
            return query.filter(false())
        return query.filter(model.house_number == user_session.house_number)
    return query


def require_house_access(house_number):
    user_session = current_session()
    if user_session is not None and not user_session.may_access_house(house_number):
        abort(403)


def require_staff():
    """Writes that span every unit are closed to tenant accounts."""
    user_session = current_session()
    if user_session is not None and user_session.house_scoped:
        abort(403)


def create_user(fields, store=None):
    store = get_store(store)
    username = (fields.get('username') or '').strip()
    password = fields.get('password') or ''
    role = fields.get('role') or 'tenant'
    if not username or not password:
        raise ValidationError('username and password are required')
    if role not in ROLES:
        raise ValidationError(f'role must be one of {", ".join(ROLES)}')
    house_number = (fields.get('house_number') or '').strip() or None
    if role == 'tenant' and house_number is None:
        raise ValidationError('house_number is required for tenant accounts')
    if User.query.filter_by(username=username).first():
        raise ConflictError('Username already exists')
    user = User(
        username=username,
        password=generate_password_hash(password),
        role=role,
        contact=fields.get('contact'),
        house_number=house_number
    )
    store.insert(user)
    logger.info("User %s created with role %s", username, role)
    return user
