import os

ROLE_OWNER = 'owner'
ROLE_ADMIN = 'admin'
ROLE_MEMBER = 'member'

WEB_HOST = os.environ.get('WEB_HOST', 'http://localhost:5173')
CLIENT_URL = os.environ.get('CLIENT_URL', 'http://localhost:5173')

SUPABASE_URL = os.environ.get('SUPABASE_URL', '')
SUPABASE_ANON_KEY = os.environ.get('SUPABASE_ANON_KEY', '')
AUTH_REQUEST_TIMEOUT_SECONDS = float(os.environ.get('AUTH_REQUEST_TIMEOUT_SECONDS', '10'))

INVITATION_EXPIRATION_DAYS = int(os.environ.get('INVITATION_EXPIRATION_DAYS', '7'))

GEOCODING_PROVIDER = os.environ.get('GEOCODING_PROVIDER', 'opencage')
GEOCODE_CONCURRENCY = int(os.environ.get('GEOCODE_CONCURRENCY', '4'))
GEOCODE_REQUEST_TIMEOUT_SECONDS = float(
    os.environ.get('GEOCODE_REQUEST_TIMEOUT_SECONDS', '10')
)
