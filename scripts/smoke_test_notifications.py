import json
import os

import requests

BASE = os.getenv("TRACKER_URL", "http://127.0.0.1:8000")

EMAIL = os.getenv("SMOKE_EMAIL", "demo@example.com")
PASSWORD = os.getenv("SMOKE_PASSWORD", "demo123")


def pretty(label, resp):
    print(f"\n=== {label} ===")
    print("STATUS:", resp.status_code)
    try:
        data = resp.json()
        print("JSON:", json.dumps(data, indent=2)[:400])
    except ValueError:
        print("RAW:", resp.text[:400])


def main():
    # the session cookie carries the alert suppression record between calls
    http = requests.Session()
    resp = http.post(f"{BASE}/auth/login", json={"email": EMAIL, "password": PASSWORD})
    pretty("LOGIN", resp)
    resp.raise_for_status()

    first = http.get(f"{BASE}/dashboard")
    pretty("DASHBOARD (first load)", first)
    second = http.get(f"{BASE}/dashboard")
    pretty("DASHBOARD (reload)", second)
    if first.ok and second.ok:
        print("\nalert on first load:", bool(first.json().get("alert")))
        print("alert on reload:", bool(second.json().get("alert")))

    pretty("LOGOUT", http.post(f"{BASE}/auth/logout"))


if __name__ == "__main__":
    main()
