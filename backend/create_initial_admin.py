# backend/create_initial_admin.py

from heliparts.database import SessionLocal
from heliparts.apps.accounts import models as account_models
from heliparts.security import create_access_token


def main() -> None:
    db = SessionLocal()
    try:
        username = "admin"
        email = "admin@heliparts.local"

        # Check if it already exists
        user = db.query(account_models.User).filter(account_models.User.username == username).first()
        if user:
            print(f"[INFO] User already exists: id={user.id}, username={user.username}")
        else:
            user = account_models.User(
                username=username,
                email=email,
                full_name="HeliParts Admin",
                role=account_models.AccountRole.ADMIN,
                is_active=True,
            )
            db.add(user)
            db.commit()
            db.refresh(user)

            print("[OK] Created admin user:")
            print(f"  id:       {user.id}")
            print(f"  username: {user.username}")
            print(f"  role:     {user.role.value}")

        token = create_access_token(data={"sub": user.id, "role": user.role.value})
        print(f"  bearer token: {token}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
