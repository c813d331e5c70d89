import os
import sys

import dotenv

from ai_paralegal_sdk import session_from_url

dotenv.load_dotenv()

# The host opens embedded apps with ?token=<exchange token>&baseUrl=<host>
app_url = sys.argv[1] if len(sys.argv) > 1 else os.environ["AI_PARALEGAL_APP_URL"]

result = session_from_url(app_url)
if result is None:
    sys.exit("The URL carries no exchange token or base URL.")

client, session = result
with client:
    print("Firm:", session.firm_id)
    print("Matter:", session.matter_id)
    print("Parameters:", session.parameters)
    print("Expires at:", session.expires_at)
