"""Print the ADMIN_PASSWORD_HASH value for an administrator password (run once for setup)."""
#imports
import getpass
import sys

from aidconnect.models import hash_password

password = sys.argv[1] if len(sys.argv) > 1 else getpass.getpass('Admin password: ')
if not password:
    print('Password must not be empty.')
    sys.exit(1)
print(f'ADMIN_PASSWORD_HASH={hash_password(password)}')
