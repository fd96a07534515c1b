#!/usr/bin/env python3
"""
gust Login and Weather Demo

This example demonstrates how to:
1. Log in through the browser and obtain an API key
2. Save the credential as JSON so later runs can skip the login
3. Fetch the weather for a city while keeping an eye on the rate limit quota

Requirements:
    pip install gust

Usage:
    python demo_login_and_weather.py London
"""

import json
import os
import sys

import gust
from gust.quota import QUOTA_WARNING
from gust.term_utils import printQuotaWarning, printQuotaError

CREDENTIAL_FILE = os.path.expanduser('~/.config/gust/auth.json')


def load_or_login():
    """
    Return a saved credential, or run the browser login and save the result.

    Return:
        gust.Credential
    """
    if os.path.isfile(CREDENTIAL_FILE):
        with open(CREDENTIAL_FILE, 'r') as f:
            return gust.Credential.from_dict(json.load(f))

    try:
        cred = gust.authenticate()
    except gust.AuthError as e:
        print(f"Login failed: {e}")
        sys.exit(1)

    os.makedirs(os.path.dirname(CREDENTIAL_FILE), exist_ok=True)
    with open(CREDENTIAL_FILE, 'w') as f:
        json.dump(cred.to_dict(), f, indent=2)
    os.chmod(CREDENTIAL_FILE, 0o600)

    print(f"Logged in as {cred.principal}")
    return cred


def main():
    city = sys.argv[1] if len(sys.argv) > 1 else 'London'
    cred = load_or_login()

    client = gust.Client(cred.server_url, cred.api_key, units='metric')
    try:
        resp = client.get_weather(city)
    except gust.QuotaError as e:
        printQuotaError(e)
        sys.exit(1)
    except gust.ApiError as e:
        print(f"Weather request failed ({e.kind}): {e}")
        sys.exit(1)

    print(f"{resp.city.name} ({resp.city.lat:.2f}, {resp.city.lon:.2f})")
    print(json.dumps(resp.weather.get('current', {}), indent=2))

    if client.quota_level == QUOTA_WARNING:
        printQuotaWarning(client.quota)


if __name__ == "__main__":
    main()
