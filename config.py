"""
Configuration for the Flask export service
"""
import os
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# ==============================================================================
# DigitalOcean Spaces (object storage for source and uploaded PDFs)
# ==============================================================================
DO_SPACES_KEY = os.getenv('DO_SPACES_KEY', '')
DO_SPACES_SECRET = os.getenv('DO_SPACES_SECRET', '')
DO_SPACES_REGION = os.getenv('DO_SPACES_REGION', 'sfo3')
DO_SPACES_BUCKET = os.getenv('DO_SPACES_BUCKET', '')
DO_SPACES_ENDPOINT = os.getenv('DO_SPACES_ENDPOINT', f'https://{DO_SPACES_REGION}.digitaloceanspaces.com')

# Seconds to wait when downloading a stored PDF
FETCH_TIMEOUT = int(os.getenv('FETCH_TIMEOUT', '60'))

# Uploads larger than this are rejected (4.5 MB)
MAX_UPLOAD_BYTES = int(os.getenv('MAX_UPLOAD_BYTES', str(int(4.5 * 1024 * 1024))))

# ==============================================================================
# Font embedded into every exported PDF (must exist at deploy time)
# ==============================================================================
FONT_PATH = os.getenv('FONT_PATH', os.path.join(BASE_DIR, 'assets', 'fonts', 'SourceHanSansCN-Regular.otf'))
FONT_NAME = os.getenv('FONT_NAME', 'SourceHanSans')

# ==============================================================================
# Language model used to draft AI annotations
# ==============================================================================
DEEPSEEK_API_KEY = os.getenv('DEEPSEEK_API_KEY', '')
DEEPSEEK_BASE_URL = os.getenv('DEEPSEEK_BASE_URL', 'https://api.deepseek.com')
DEEPSEEK_MODEL = os.getenv('DEEPSEEK_MODEL', '')
DEEPSEEK_TIMEOUT = int(os.getenv('DEEPSEEK_TIMEOUT', '120'))

# Some container images lack the CA bundle needed for Spaces; set to "false" there
SPACES_VERIFY_SSL = os.getenv('SPACES_VERIFY_SSL', 'true').lower() not in ('0', 'false', 'no')
