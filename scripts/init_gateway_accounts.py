#!/usr/bin/env python3
"""Initialize gateway accounts for Kernex Server.

Creates development FTP accounts in the s_gateway_account table and,
with --enable, switches the gateway on for the next server start.
"""

import argparse
import asyncio

from kernex_core.credentials import CredentialRecord, PasswordHasher
from kernex_core.errors import ConflictError
from kernex_core.settings import GATEWAY_ENABLED
from kernex_core.workspace import confine, relative_path
from kernex_server.config import get_settings
from kernex_server.database import DatabaseFactory

DEV_ACCOUNTS = [
    {"username": "admin", "password": "admin1234", "root_dir": ""},
    {"username": "alice", "password": "alice1234", "root_dir": "team-a"},
    {"username": "bob", "password": "bob12345", "root_dir": "team-b"},
]


async def create_accounts(enable: bool) -> None:
    """Create development accounts, skipping existing ones."""
    settings = get_settings()
    await DatabaseFactory.create_tables()
    store = await DatabaseFactory.create_credential_store()
    hasher = PasswordHasher(rounds=settings.password_hash_rounds)

    for account in DEV_ACCOUNTS:
        root = confine(settings.workspace_root, account["root_dir"])
        record = CredentialRecord(
            username=account["username"],
            password_hash=hasher.hash(account["password"]),
            root_dir=relative_path(settings.workspace_root, root),
        )
        try:
            await store.create_account(record)
        except ConflictError:
            print(f"Account '{record.username}' already exists, skipping")
            continue
        print(f"Created account: {record.username} -> /{record.root_dir}")

    if enable:
        settings_store = await DatabaseFactory.create_settings_store()
        await settings_store.set_setting(GATEWAY_ENABLED, True)
        print("Gateway enabled")

    print("\nLogin credentials:")
    print("-" * 40)
    for account in DEV_ACCOUNTS:
        print(f"  Username: {account['username']}")
        print(f"  Password: {account['password']}")
        print()


async def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--enable", action="store_true", help="Enable the FTP gateway")
    args = parser.parse_args()

    print("Initializing Kernex gateway accounts...")
    print("=" * 50)

    try:
        await create_accounts(args.enable)
    finally:
        await DatabaseFactory.close()


if __name__ == "__main__":
    asyncio.run(main())
