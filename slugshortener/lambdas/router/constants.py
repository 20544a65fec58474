# Log event codes
HEALTH_CHECK = 'HEALTH_CHECK'
PUBLIC_LISTING = 'PUBLIC_LISTING'
HOME_REDIRECT = 'HOME_REDIRECT'
INVALID_SLUG = 'INVALID_SLUG'
RATE_LIMITED = 'RATE_LIMITED'
URL_NOT_FOUND = 'URL_NOT_FOUND'
CRAWLER_PREVIEW = 'CRAWLER_PREVIEW'
REDIRECT_SUCCESS = 'REDIRECT_SUCCESS'
UNAUTHORIZED = 'UNAUTHORIZED'
LOGIN_SUCCESS = 'LOGIN_SUCCESS'
LOGIN_FAILED = 'LOGIN_FAILED'
LOGOUT = 'LOGOUT'
URL_CREATED = 'URL_CREATED'
URL_UPDATED = 'URL_UPDATED'
URL_DELETED = 'URL_DELETED'
REQUEST_REJECTED = 'REQUEST_REJECTED'

# Rate limit purposes (key namespaces)
REDIRECT_PURPOSE = 'redirect'
ADMIN_PURPOSE = 'admin'
