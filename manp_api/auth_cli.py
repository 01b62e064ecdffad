"""
One-shot Google Drive authorization.

Prints the consent URL, opens it in the browser, then waits for the code
shown by Google and stores the resulting token pair at TOKEN_PATH.
The account must be listed as a test user on the OAuth consent screen
while the app is unverified.
"""

import sys
import webbrowser

import structlog

from manp_api.core.exceptions import CredentialError
from manp_api.core.logging import setup_logging
from manp_api.services.credential_store import CredentialStore

logger = structlog.get_logger()


def main() -> int:
    setup_logging()
    store = CredentialStore.from_settings()

    url = store.authorization_url()
    print("\nOpen this URL to grant access to the backend:\n")
    print(url + "\n")
    webbrowser.open(url)

    code = input("Paste the code from the OAuth page here: ").strip()
    try:
        store.exchange_code(code)
    except CredentialError as e:
        logger.error("authorization_failed", error=e.message)
        return 1

    print(f"\nToken saved to {store.token_path}. The backend can now access Google Drive.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
