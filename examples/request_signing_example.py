#!/usr/bin/env python3
"""
Kobas Python SDK - Request Signing Example

This example demonstrates how to sign Kobas API requests: direct signing,
signed-header restriction, custom configuration, requests integration and
error handling. Nothing is sent over the network.
"""

import time
import sys
import os
from datetime import datetime, timezone

# Add src to path for development
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

import requests

from kobas_sdk import (
    # Request signing
    create_signer,
    create_signing_config,
    SignableRequest,
    SigningOptions,
    # HTTP integration
    KobasAuth,
    create_signing_session,
    # Errors
    SigningError,
)

FIXED_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def basic_signing_example():
    """Demonstrate basic request signing workflow"""
    print("=== Basic Request Signing Example ===")

    print("1. Creating signer...")
    signer = create_signer("C1", "I1", b"s3cr3t")
    print(f"   Credential: {signer.credentials.credential_id}")
    print(f"   Region: {signer.config.region}")

    print("\n2. Signing GET request...")
    headers = signer.sign(
        "GET",
        "https://api.kobas.co.uk/v2/orders?b=2&a=1",
        timestamp=FIXED_TIME
    )
    for line in headers:
        print(f"   {line}")

    print("\n3. Signing POST request with a form payload...")
    request = SignableRequest(
        method="POST",
        url="https://api.kobas.co.uk/v2/customers",
        headers={"Content-Type": "application/x-www-form-urlencoded"},
        params={"customer": {"name": "Ada", "email": "ada@example.com"}}
    )

    start_time = time.perf_counter()
    result = signer.sign_request(request, SigningOptions(timestamp=FIXED_TIME))
    end_time = time.perf_counter()
    print(f"   Signing completed in {(end_time - start_time) * 1000:.2f}ms")

    print("\n4. Canonical request that was signed:")
    print("   " + "\n   ".join(result.canonical_request.split('\n')))

    print("\n5. String to sign:")
    print("   " + "\n   ".join(result.string_to_sign.split('\n')))

    return result


def signed_headers_example():
    """Demonstrate restricting the signed headers"""
    print("\n\n=== Signed Header Restriction Example ===")

    signer = create_signer("C1", "I1", b"s3cr3t")
    headers = {
        "Content-Type": "application/json",
        "X-Request-Id": "7f3c",
    }

    for restriction in (None, ["Content-Type"]):
        result = signer.sign_request(
            SignableRequest(
                method="POST",
                url="https://api.kobas.co.uk/v2/orders",
                headers=headers,
                params='{"id": 5}'
            ),
            SigningOptions(timestamp=FIXED_TIME, signed_headers=restriction)
        )
        print(f"   restriction={restriction}: {';'.join(result.signed_headers)}")


def custom_config_example():
    """Demonstrate custom signer configuration"""
    print("\n\n=== Custom Configuration Example ===")

    config = (create_signing_config()
              .region("uk-man-1")
              .timestamp_generator(lambda: FIXED_TIME)
              .log_canonical_requests()
              .build())

    signer = create_signer("C1", "I1", b"s3cr3t", config)
    for line in signer.sign("GET", "https://api.kobas.co.uk/v2/stock"):
        print(f"   {line}")


def http_integration_example():
    """Demonstrate requests integration"""
    print("\n\n=== HTTP Integration Example ===")

    signer = create_signer("C1", "I1", b"s3cr3t")

    print("1. Signing a prepared request:")
    prepared = requests.Request(
        "POST",
        "https://api.kobas.co.uk/v2/orders",
        data={"id": 5, "status": "open"}
    ).prepare()
    KobasAuth(signer)(prepared)
    print(f"   Body: {prepared.body}")
    print(f"   Authorization: {prepared.headers['Authorization'][:72]}...")

    print("\n2. Creating a signing session:")
    session = create_signing_session(signer, signed_headers=["Content-Type"])
    print(f"   Session auth: {type(session.auth).__name__}")


def performance_benchmark():
    """Demonstrate signing performance"""
    print("\n\n=== Performance Benchmark ===")

    signer = create_signer("C1", "I1", b"s3cr3t")

    test_cases = [
        ("Small payload", {"test": True}),
        ("Medium payload", {"items": [{"sku": f"SKU{i}", "qty": i} for i in range(50)]}),
        ("Large payload", {"data": "x" * 10000}),
    ]

    for name, params in test_cases:
        request = SignableRequest(
            method="POST",
            url="https://api.kobas.co.uk/v2/orders",
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            params=params
        )

        iterations = 100
        start_time = time.perf_counter()

        for _ in range(iterations):
            signer.sign_request(request)

        end_time = time.perf_counter()
        avg_time_ms = ((end_time - start_time) / iterations) * 1000

        print(f"{name:15s}: {avg_time_ms:.2f}ms avg")


def error_handling_example():
    """Demonstrate error handling"""
    print("\n\n=== Error Handling Example ===")

    print("1. Configuration errors:")
    try:
        create_signing_config().region("uk lon 1").build()
    except SigningError as e:
        print(f"   Invalid region: {type(e).__name__}: {e}")

    print("\n2. Request errors:")
    signer = create_signer("C1", "I1", b"s3cr3t")

    try:
        signer.sign("GET", "not-a-url")
    except SigningError as e:
        print(f"   Invalid URL: {type(e).__name__}: {e}")

    try:
        signer.sign("POST", "https://api.kobas.co.uk/v2/orders", params=object())
    except SigningError as e:
        print(f"   Unsupported payload: {type(e).__name__}: {e}")

    print("\n3. Cleared credentials:")
    signer.clear_credentials()
    try:
        signer.sign("GET", "https://api.kobas.co.uk/v2/orders")
    except SigningError as e:
        print(f"   Missing credential: {type(e).__name__}: {e}")


def main():
    """Run all examples"""
    print("Kobas Python SDK - Request Signing Examples")
    print("=" * 50)

    basic_signing_example()
    signed_headers_example()
    custom_config_example()
    http_integration_example()
    performance_benchmark()
    error_handling_example()

    print("\n\n=== All Examples Completed Successfully! ===")


if __name__ == "__main__":
    main()
