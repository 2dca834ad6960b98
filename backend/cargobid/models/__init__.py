from .companies import Company, Address, COMPANY_TYPES, COMPANY_STATUSES
from .auth import User, SessionToken, USER_ROLES
from .quotes import Quote, Bid, QUOTE_STATUSES, BID_STATUSES
from .audit import AuditLog

__all__ = [
    'Company', 'Address', 'COMPANY_TYPES', 'COMPANY_STATUSES',
    'User', 'SessionToken', 'USER_ROLES',
    'Quote', 'Bid', 'QUOTE_STATUSES', 'BID_STATUSES',
    'AuditLog',
]
