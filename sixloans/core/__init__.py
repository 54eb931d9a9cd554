from sixloans.core.config import settings, Settings
from sixloans.core.security import hash_password, verify_password, create_access_token, decode_token, is_valid_password
