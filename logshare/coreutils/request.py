import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry


USER_AGENT = "logshare-cli/1.0"

# No retries: a failed page is reported straight back to the caller.
NO_RETRY_STRATEGY = Retry(total=0, read=False, raise_on_status=False)


def new_session() -> requests.Session:
    """Create a new requests session without automatic retries"""
    session = requests.Session()
    adapter = HTTPAdapter(max_retries=NO_RETRY_STRATEGY)
    session.mount("http://", adapter)
    session.mount("https://", adapter)

    # Set default headers
    session.headers.update({"User-Agent": USER_AGENT})

    return session
