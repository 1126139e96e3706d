#!/usr/bin/env python
"""
Log in with a user key, inspect keys and sessions, then close the current session.

Sessions expire after 24 hours of inactivity or when the service restarts, so
every session-scoped call checks for UNAUTHORIZED and logs in again.

Usage:
    export ITBUILD_BASE_URL=https://api.example.com/
    export ITBUILD_PRIVATE_KEY=a32be814...
    python examples/session_walkthrough.py
"""

import argparse
import asyncio
import os
import sys
import uuid

from loguru import logger

from itbuild import ErrorObject, ItBuildAuth


async def run(base_url: str, private_key: str, device_id: str) -> int:
    async with ItBuildAuth(base_url=base_url, device_id=device_id) as auth:
        login = await auth.authenticate_with_user_key(private_key)
        if login.error is not None:
            logger.error("Login failed: {}", login.error)
            return 1
        logger.info("Logged in")

        keys = await auth.get_user_keys()
        if keys.error == ErrorObject.UNAUTHORIZED:
            logger.warning("Session expired, logging in again")
            login = await auth.authenticate_with_user_key(private_key)
            keys = await auth.get_user_keys()
        for key in keys.result or []:
            logger.info("key {} ({}){}", key.id, key.key_type, " [current]" if key.current else "")

        sessions = await auth.get_sessions()
        if sessions.error == ErrorObject.UNAUTHORIZED:
            logger.warning("Session expired, logging in again")
            login = await auth.authenticate_with_user_key(private_key)
            sessions = await auth.get_sessions()
        if sessions.result is None:
            logger.error("Could not list sessions: {}", sessions.error)
            return 1

        current = next((s for s in sessions.result if s.current), None)
        if current is None:
            logger.warning("No current session reported")
            return 0

        closed = await auth.close_sessions(current.id)
        if closed.error is not None or not closed.is_success:
            logger.error("Could not close session {}: {}", current.id, closed.error or closed.result)
            return 1

        logger.info("Closed session {}; authenticated={}", current.id, auth.is_authenticated)
        return 0


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--base-url", default=os.getenv("ITBUILD_BASE_URL"))
    parser.add_argument("--private-key", default=os.getenv("ITBUILD_PRIVATE_KEY"))
    parser.add_argument("--device-id", default=os.getenv("ITBUILD_DEVICE_ID") or str(uuid.uuid4()))
    args = parser.parse_args()

    if not args.base_url or not args.private_key:
        parser.error("--base-url and --private-key (or the ITBUILD_* variables) are required")

    sys.exit(asyncio.run(run(args.base_url, args.private_key, args.device_id)))


if __name__ == "__main__":
    main()
