"""Small CLI helpers installed as console scripts for developer convenience.

Usage (from project root, after `pip install -e .`):
  runserver --host=0.0.0.0 --port=8000 --no-reload
  run-tests
  migrate          # defaults to `alembic upgrade head`
  init-env         # copies .env.example -> .env if missing
  create-admin --nic=199012345678 --email=admin@hercycle.com --password=... --name="Site Admin"
"""
from __future__ import annotations

import sys
import shutil
import subprocess
from pathlib import Path
from typing import Dict, List

import uvicorn


def _args() -> List[str]:
    return sys.argv[1:]


def _options() -> Dict[str, str]:
    opts = {}
    for a in _args():
        if a.startswith("--") and "=" in a:
            key, value = a[2:].split("=", 1)
            opts[key] = value
    return opts


def runserver() -> None:
    """Run Uvicorn programmatically. Accepts simple flags:

    --host=<host>  (default 127.0.0.1)
    --port=<port>  (default 8000)
    --no-reload    (disable auto-reload)
    --reload       (enable auto-reload)
    """
    host = "127.0.0.1"
    port = 8000
    reload = True

    for a in _args():
        if a.startswith("--host="):
            host = a.split("=", 1)[1]
        elif a.startswith("--port="):
            try:
                port = int(a.split("=", 1)[1])
            except ValueError:
                print(f"Ignoring invalid port: {a}")
        elif a == "--no-reload":
            reload = False
        elif a == "--reload":
            reload = True

    print(f"Starting uvicorn on {host}:{port} (reload={reload})")
    uvicorn.run("hercycle.main:app", host=host, port=port, reload=reload)


def run_tests() -> None:
    """Run pytest with any forwarded args."""
    cmd = ["pytest"] + _args()
    subprocess.run(cmd, check=True)


def run_migrations() -> None:
    """Run alembic. If no args provided, runs `alembic upgrade head`."""
    args = _args()
    if args:
        cmd = ["alembic"] + args
    else:
        cmd = ["alembic", "upgrade", "head"]
    subprocess.run(cmd, check=True)


def init_env() -> None:
    """Copy `.env.example` to `.env` if `.env` is missing."""
    root = Path(__file__).resolve().parents[1]
    src = root / ".env.example"
    dst = root / ".env"
    if dst.exists():
        print(f".env already exists at {dst}")
        return
    if not src.exists():
        print(f".env.example not found at {src}")
        return
    shutil.copy(src, dst)
    print(f"Created .env from .env.example at {dst}")


def create_admin() -> None:
    """Create an active admin account. Admins cannot self-register."""
    from hercycle.core.constants import AccountStatus, UserRole
    from hercycle.core.database import SessionLocal
    from hercycle.core.security import hash_password
    from hercycle.models.user import User
    from hercycle.utils.errors import InvalidNICError
    from hercycle.utils.validators import parse_nic

    opts = _options()
    missing = [k for k in ("nic", "email", "password", "name") if not opts.get(k)]
    if missing:
        print(f"Missing options: {', '.join('--' + k for k in missing)}")
        sys.exit(2)

    try:
        nic_info = parse_nic(opts["nic"])
    except InvalidNICError as exc:
        print(exc.detail)
        sys.exit(2)

    db = SessionLocal()
    try:
        email = opts["email"].strip().lower()
        if db.query(User).filter((User.nic == nic_info.nic) | (User.email == email)).first():
            print("A user with this NIC or email already exists")
            sys.exit(1)
        db.add(
            User(
                nic=nic_info.nic,
                email=email,
                full_name=opts["name"],
                password_hash=hash_password(opts["password"]),
                gender=nic_info.gender,
                date_of_birth=nic_info.date_of_birth,
                role=UserRole.ADMIN.value,
                account_status=AccountStatus.ACTIVE.value,
            )
        )
        db.commit()
    finally:
        db.close()
    print(f"Created admin {email}")


if __name__ == "__main__":
    # Allow running the helpers directly: python -m hercycle.cli runserver
    if len(sys.argv) <= 1:
        print(__doc__)
        sys.exit(0)
    cmd = sys.argv[1]
    sys.argv.pop(1)
    if cmd == "runserver":
        runserver()
    elif cmd in ("run-tests", "tests", "test"):
        run_tests()
    elif cmd in ("migrate", "alembic"):
        run_migrations()
    elif cmd in ("init-env", "initenv"):
        init_env()
    elif cmd == "create-admin":
        create_admin()
    else:
        print(f"Unknown command: {cmd}")
