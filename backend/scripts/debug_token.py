#!/usr/bin/env python3
"""
Diagnose a password recovery link pasted from the email.

  python scripts/debug_token.py                  # prompts for the link
  python scripts/debug_token.py "https://..."
"""
import sys
from pathlib import Path

backend_dir = Path(__file__).resolve().parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from sad.services.token_debug import analyze_recovery_link


def _mark(value) -> str:
    return "✅" if value else "❌"


def main():
    raw = sys.argv[1] if len(sys.argv) > 1 else input("Pega aquí tu URL/token completo del email:\n")
    if not raw.strip():
        print("❌ No se proporcionó ningún token")
        return 1

    report = analyze_recovery_link(raw)
    c = report["characteristics"]
    print(f"\nLongitud: {report['length']} caracteres")
    print(f"Contiene '#': {c['has_hash']}  '?': {c['has_query']}  access_token: {c['has_access_token']}  "
          f"refresh_token: {c['has_refresh_token']}  type: {c['has_type']}")
    print("Método:", report["method"] or "ninguno")

    if report["is_verify_link"]:
        print("\nEnlace de verificación reconocido")
        print(f"  Token: {report['verify_token'][:20]}...")
        print(f"  Tipo: {report['token_type']}")
        print(f"  Proyecto: {report['project_id']}")
        if report["redirect_to"]:
            print(f"  Redirige a: {report['redirect_to']}")
        print("Abre el enlace directamente en el navegador para canjear el token.")
    else:
        print(f"\nAccess token: {_mark(report['access_token'])}")
        print(f"Refresh token: {_mark(report['refresh_token'])}")
        print(f"Tipo: {report['token_type'] or 'N/A'}")
        claims = report.get("access_claims")
        if claims:
            if claims.get("valid_format"):
                print(f"  sub={claims.get('sub')} email={claims.get('email')} role={claims.get('role')}")
                if "expires_at" in claims:
                    print(f"  caduca: {claims['expires_at']} ({'caducado' if claims['expired'] else 'vigente'})")
            else:
                print("  JWT ilegible:", claims.get("error"))

    for w in report["warnings"]:
        print("⚠️ ", w)
    ok = report["is_verify_link"] or (report["access_token"] and report["refresh_token"])
    if not ok:
        print("\nCopia la URL completa del email, sin saltos de línea.")
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
