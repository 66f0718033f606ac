#!/usr/bin/env python3
"""
Walk through a complete client → host → client licensing handshake.
"""
import json
import logging

from tracklicense_sdk import (
    TrackRequest, approve_request, confirm_license, derive_public_key,
    generate_private_key, is_track_receipt_valid, now_seconds, random_nonce,
)


def main():
    """
    Demonstrate the three steps of the handshake.

    This example shows how to:
    1. Build a request as the client
    2. Approve it into a license as the host
    3. Confirm the license into a receipt as the client
    """
    logging.basicConfig(level=logging.INFO)

    # --- Client ---
    client_key = generate_private_key()
    request = TrackRequest(
        client_pubkey=derive_public_key(client_key),
        track_id="some track id",
        r=random_nonce(),
        timestamp=now_seconds(),
    )

    # --- Host ---
    host_key = generate_private_key()
    license = approve_request(request, host_key)
    if license is None:
        print("ERROR: host refused the request")
        return
    print("License: \n" + json.dumps(license.to_wire(), indent=2))

    # --- Client ---
    receipt = confirm_license(license, client_key)
    if receipt is None:
        print("ERROR: client could not confirm the license")
        return
    print("Receipt: \n" + json.dumps(receipt.to_wire(), indent=2))
    print(f"Receipt valid: {is_track_receipt_valid(receipt)}")


if __name__ == "__main__":
    main()
