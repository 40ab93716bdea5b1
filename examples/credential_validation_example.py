#!/usr/bin/env python3
"""
Kerberos Credential Validation Example

Demonstrates how to use kerbcred to check user existence and validate
passwords against a realm, keeping "unknown user" apart from
"KDC unreachable".

Features:
1. Existence probe (is_user_available)
2. Password validation (valid_user)
3. Delegated credential storage in session notes
4. KDC outage handling
5. Async facade with a login timeout

Runs against the simulated KDC; pass --native to use GSSAPI.
"""

import asyncio
import sys

from kerbcred import (
    AsyncKerberosAuthenticator,
    InMemoryNoteStore,
    KerberosAuthenticator,
    KerberosConfig,
    ProviderUnavailable,
    create_kerberos_authenticator,
)


def main():
    """Demonstrate Kerberos credential validation."""

    print("=" * 70)
    print("kerbcred - Kerberos Credential Validation")
    print("=" * 70)
    print()

    REALM = "EXAMPLE.COM"
    use_native = "--native" in sys.argv

    auth = create_kerberos_authenticator(REALM, use_native=use_native)
    if not use_native:
        auth.provider.add_principal("jdoe", "secret")

    # ==========================================================================
    # EXAMPLE 1: Existence Probe
    # ==========================================================================
    print("1. Existence Probe")
    print("-" * 40)

    for username in ("jdoe", "ghost", "jdoe@OTHER.REALM"):
        print(f"   {username:<20} available: {auth.is_user_available(username)}")
    print()

    # ==========================================================================
    # EXAMPLE 2: Password Validation
    # ==========================================================================
    print("2. Password Validation")
    print("-" * 40)

    for password in ("secret", "wrong"):
        print(f"   jdoe / {password:<10} valid: {auth.valid_user('jdoe', password)}")
    print()

    # ==========================================================================
    # EXAMPLE 3: Delegated Credential
    # ==========================================================================
    print("3. Delegated Credential")
    print("-" * 40)

    notes = InMemoryNoteStore()
    with auth.authenticate("jdoe", "secret", notes=notes) as session:
        print(f"   Principal: {session.principal}")
        print(f"   State: {session.state.name}")
        credential = notes.delegated_credential(session.principal)
        print(f"   Stored credential: {len(credential.ticket) if credential else 0} bytes")
    print(f"   State after logout: {session.state.name}")
    print()

    # ==========================================================================
    # EXAMPLE 4: KDC Outage
    # ==========================================================================
    if not use_native:
        print("4. KDC Outage")
        print("-" * 40)

        auth.provider.available = False
        try:
            auth.valid_user("jdoe", "secret")
        except ProviderUnavailable as e:
            print(f"   ProviderUnavailable: {e.message}")
        auth.provider.available = True
        print()

    # ==========================================================================
    # EXAMPLE 5: Async Facade
    # ==========================================================================
    print("5. Async Facade")
    print("-" * 40)

    config = KerberosConfig(realm=REALM, login_timeout=5.0)
    async_auth = AsyncKerberosAuthenticator(
        KerberosAuthenticator(config=config, provider=auth.provider)
    )

    async def check_all():
        return await asyncio.gather(
            async_auth.valid_user("jdoe", "secret"),
            async_auth.valid_user("jdoe", "wrong"),
            async_auth.is_user_available("ghost"),
        )

    print(f"   Results: {asyncio.run(check_all())}")
    print()

    # ==========================================================================
    # EXAMPLE 6: Session Trace
    # ==========================================================================
    print("6. Session Trace")
    print("-" * 40)
    print(session.export_trace_json())


if __name__ == "__main__":
    main()
