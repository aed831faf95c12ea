# config.py
import os

from dotenv import load_dotenv

load_dotenv()

SCOPES = [
    'https://www.googleapis.com/auth/gmail.modify'
]

CLIENT_SECRETS_FILE = os.getenv("GDELETE_CLIENT_SECRETS", "client_secret.json")
CREDENTIALS_PATH = os.getenv(
    "GDELETE_CREDENTIALS_PATH",
    os.path.join(os.path.expanduser("~"), ".credentials", "gmail-gdelete.json"),
)
USER_ID = os.getenv("GDELETE_USER_ID", "me")

# Gmail accepts more per page, but 100 keeps each drain short enough to report progress often.
PAGE_SIZE = int(os.getenv("GDELETE_PAGE_SIZE", "100"))
LIST_FIELDS = "messages/id,nextPageToken,resultSizeEstimate"

# Upper bound on trash calls grouped into one batch request.
MAX_BATCH_SIZE = 15
BATCH_SIZE = max(1, min(int(os.getenv("GDELETE_BATCH_SIZE", str(MAX_BATCH_SIZE))), MAX_BATCH_SIZE))

CONFIRMATION_TOKEN = "y"
