#!/usr/bin/env python3
"""
Example of injecting a preconfigured httpx client.

Useful when the transport needs custom headers, timeouts or TLS settings
that the default constructors do not cover.
"""

import httpx

from etcd_keyspace import EtcdKeyClient, KeyNotFoundError, setup_logging

setup_logging(level="DEBUG", http_level="INFO")


def main():
    http = httpx.Client(
        base_url="http://127.0.0.1:2379",
        headers={"X-Request-Source": "custom-client-example"},
        timeout=httpx.Timeout(2.0, connect=1.0),
    )

    # The client never closes an injected transport
    client = EtcdKeyClient(http, root="/apps/myapp")
    try:
        print("🚀 Queue with server-generated keys...")
        client.mkdir("jobs", ttl=600)
        for job in ("resize", "thumbnail", "publish"):
            client.set_with_in_order_key("jobs", job)

        for key, value in client.get_keys_value("jobs").items():
            print(f"  {key} -> {value}")

        print("\n⏰ Refreshing directory TTL...")
        client.update_dir("jobs", 1200)
        print(f"  ttl: {client.get_node('jobs').ttl}")

        client.rmdir("jobs", recursive=True)
        try:
            client.list_dir("jobs")
        except KeyNotFoundError as e:
            print(f"\n✅ Removed: {e}")
    finally:
        http.close()


if __name__ == "__main__":
    main()
