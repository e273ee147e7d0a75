#!/usr/bin/env python3
"""
Basic usage examples for the OVH API client library.

Credentials are read from a property-list file given as first argument
(keys ApplicationKey, ApplicationSecret, ConsumerKey), or from the
OVH_APPLICATION_KEY / OVH_APPLICATION_SECRET / OVH_CONSUMER_KEY
environment variables.
"""

import logging
import sys

import requests

from ovh_client import (
    OVHClient,
    Endpoint,
    OVHAPIError,
    all_rights,
    load_credentials,
    credentials_from_env
)

TIMEOUT = 30


def request_consumer_key(client):
    """Walk the user through the credential handshake."""

    print("1. Requesting credentials...")
    result = client.request_credentials(all_rights("/me*"), "https://www.ovh.com/fr/").result(timeout=TIMEOUT)
    if result.error is not None:
        print(f"   ✗ Credential request failed: {result.error}")
        return False

    print(f"   Consumer key: {result.consumer_key}")
    print(f"   Open this URL to validate it: {result.validation_url}")
    answer = input("   Validated? [y/N] ")
    if answer.strip().lower() != "y":
        client.abandon_credentials(result)
        print("   ✗ Validation abandoned, previous consumer key restored")
        return False

    print("   ✓ Consumer key validated, save it as ConsumerKey")
    print()
    return True


def main():
    """Run basic usage examples."""

    if len(sys.argv) > 1:
        credentials = load_credentials(sys.argv[1])
    else:
        credentials = credentials_from_env()

    print("=== OVH API Client Basic Usage Examples ===\n")

    with OVHClient.from_credentials(Endpoint.OVH_EU, credentials, timeout=TIMEOUT) as client:
        print(f"   Client created for: {client.endpoint}")
        print(f"   Application key: {client.application_key[:4]}...\n")

        if not client.consumer_key and not request_consumer_key(client):
            sys.exit(1)

        print("2. Synchronising with the server clock...")
        try:
            delta = client.calculate_delta_time()
            print(f"   ✓ Delta time: {delta:.3f} seconds")
        except (OVHAPIError, requests.RequestException) as e:
            print(f"   ✗ Server time unavailable: {e}")
            sys.exit(1)
        print()

        print("3. Testing authenticated GET request...")
        outcome = client.get("/me").result(timeout=TIMEOUT)
        if outcome.error is None:
            print(f"   ✓ Account: {outcome.result['nichandle']} ({outcome.result['email']})")
        else:
            print(f"   ✗ GET request failed: {outcome.error}")
        print()

        print("4. Listing VPS with a callback...")

        def print_vps(result, error, request, response):
            if error is not None:
                print(f"   ✗ VPS listing failed: {error}")
            else:
                print(f"   ✓ {len(result)} VPS: {', '.join(result) or '-'}")

        client.get("/vps", callback=print_vps).result(timeout=TIMEOUT)
        print()

    print("=== All Examples Completed ===")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    main()
