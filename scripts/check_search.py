import os
import sys

import httpx
from dotenv import load_dotenv

# Manual smoke check against a running server:
# uvicorn spell_search.main:app --port 8000
# python3 scripts/check_search.py fireball

load_dotenv()

SERVER_URL = os.getenv("SPELL_SEARCH_URL", "http://localhost:8000")


def check(params):
    print(f"GET {SERVER_URL}/api/search {params}")
    try:
        resp = httpx.get(f"{SERVER_URL}/api/search", params=params, timeout=10)
    except httpx.ConnectError:
        print("Could not connect to the search API. Is it running on port 8000?")
        return False

    print(f"Status Code: {resp.status_code}")
    if resp.status_code != 200:
        print("Error response:")
        print(resp.text)
        return False

    hits = resp.json().get("hits", [])
    print(f"{len(hits)} hits")
    for hit in hits[:10]:
        doc = hit["document"]
        print(f"  {doc['name']} (level {doc['level']}, {doc['school']})")
    return True


if __name__ == "__main__":
    term = sys.argv[1] if len(sys.argv) > 1 else "fire"
    ok = check({"q": term})
    ok = check({"level": "3", "school": "Evocation"}) and ok
    sys.exit(0 if ok else 1)
