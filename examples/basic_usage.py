#!/usr/bin/env python3
"""
Basic usage example for etcd-keyspace.

This example demonstrates:
1. Connecting to etcd with a root namespace
2. Create-only and update-only writes
3. Listing a directory tree

Requires a running etcd with the v2 API enabled (etcd --enable-v2).
"""

import os

from etcd_keyspace import EtcdError, EtcdKeyClient, KeyExistsError, setup_logging

setup_logging(level=os.getenv("LOG_LEVEL", "INFO"))


def main():
    """Main application function."""
    endpoint = os.getenv("EtcdSettings__HostName", "http://127.0.0.1:2379")
    print(f"🔗 Etcd endpoint: {endpoint}")

    with EtcdKeyClient.connect(endpoint, root="/demo/app") as client:
        try:
            print("⚙️  Creating keys...")
            try:
                client.mk("ApiUrl", "https://api.demo.com")
            except KeyExistsError:
                client.update("ApiUrl", "https://api.demo.com")
            client.set("Limits/MaxWorkers", "8")
            client.set("Limits/Timeout", "30", ttl=300)

            print(f"  ApiUrl: {client.get('ApiUrl')}")

            print("\n📋 Keys under /demo/app:")
            for key in client.ls("/", recursive=True):
                print(f"  {key}")

            print("\n🔍 Values:")
            for key, value in client.get_keys_value("/").items():
                print(f"  {key} = {value}")

            # set() returns error bodies instead of raising
            body = client.set("ApiUrl", "ignored", condition={"prevValue": "stale"})
            if "errorCode" in body:
                print(f"\n⚠️  Conditional set rejected: {body['message']}")
        except EtcdError as e:
            print(f"❌ etcd error: {e}")
            raise
        finally:
            print("🧹 Cleaning up...")
            client.rmdir("/", recursive=True)

    print("👋 Goodbye!")


if __name__ == "__main__":
    main()
