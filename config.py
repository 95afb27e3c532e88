import os
from datetime import timedelta

from dotenv import load_dotenv

from routine import NOISE_PATTERNS

load_dotenv()


class Config:
    SECRET_KEY = os.environ.get('FLASK_SECRET_KEY', 'change-this-secret')
    DATABASE = os.environ.get('ROUTINE_DB_PATH', 'routine.db')

    # Seed admin account (created on first init_db)
    ADMIN_USERNAME = os.environ.get('ADMIN_USERNAME', 'admin')
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASS', 'admin123')

    PERMANENT_SESSION_LIFETIME = timedelta(hours=8)
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'

    INSTITUTE = os.environ.get('INSTITUTE', 'Department of CSE')
    MAX_CONTENT_LENGTH = int(os.environ.get('MAX_UPLOAD_MB', '10')) * 1024 * 1024
    ALLOWED_EXTENSIONS = {'csv', 'xlsx', 'xls'}

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Footer/notice phrases ignored as routine entries
    NOISE_PATTERNS = NOISE_PATTERNS
