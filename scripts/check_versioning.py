"""
Versioning Smoke Check

Runs the client startup handshake against the configured backend and
prints what a client with this configuration would see.
Run from project root: python scripts/check_versioning.py

Uses the mock backend in development mode; set ENV_MODE=staging plus
SUPABASE_URL / SUPABASE_ANON_KEY to hit a real project.

Author: Khalil_Bannouri
Version: 1.0.0
"""

import asyncio
import sys
import os
import argparse
from datetime import datetime
from typing import Optional

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from versiongate.core.config import get_settings, setup_logging
from versiongate.services.backend import get_backend_client
from versiongate.services.versioning import (
    get_compatibility_gate,
    get_version_negotiator,
)

# Windows event loop fix
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())


async def run_check(feature: Optional[str] = None) -> bool:
    """Print identity, negotiated version, compatibility and flags."""
    settings = get_settings()
    negotiator = get_version_negotiator()
    gate = get_compatibility_gate()
    backend = get_backend_client()

    print("=" * 60)
    print("🔍 VERSIONING CHECK")
    print("=" * 60)
    print(f"⏰ Timestamp: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print(f"🌐 Environment: {settings.env_mode.value}")
    print(f"🔌 Backend: {backend.provider_name}")
    print("=" * 60)

    info = negotiator.version_info()
    print(f"\n📱 CLIENT:")
    print(f"   App: {info.app_name} v{info.app_version}")
    print(f"   API Version: {info.api_version}")
    print(f"   Best API Version: {negotiator.best_api_version().value}")
    print(f"   Supported: {', '.join(info.supported_versions)}")

    print(f"\n📨 HEADERS:")
    for name, value in negotiator.headers().items():
        print(f"   {name}: {value}")

    if not await backend.health_check():
        print("\n❌ Backend health check failed")
        await backend.close()
        return False

    result = await gate.init_versioning()

    print(f"\n🧩 SCHEMA:")
    print(f"   {'✅ Compatible' if result.compatible else '❌ Incompatible'}")

    print(f"\n🚩 FEATURE FLAGS ({len(result.features)}):")
    for flag in result.features:
        active = negotiator.is_feature_enabled(result.features, flag.feature)
        requirement = f" (min v{flag.min_version})" if flag.min_version else ""
        print(f"   {'✅' if active else '⬜'} {flag.feature}{requirement}")

    if feature:
        active = negotiator.is_feature_enabled(result.features, feature)
        print(f"\n🔎 {feature}: {'enabled' if active else 'disabled'}")

    print("\n" + "=" * 60)
    await backend.close()
    return result.compatible


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Versioning Smoke Check")
    parser.add_argument("--feature", help="Report whether one feature is enabled")
    args = parser.parse_args()

    setup_logging()
    ok = asyncio.run(run_check(args.feature))
    sys.exit(0 if ok else 1)
