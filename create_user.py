#!/usr/bin/env python3
"""
Standalone script to register a user and print a bearer token for it
Usage: python create_user.py
"""

import asyncio
from sqlalchemy import select
from app.core.database import AsyncSessionLocal, engine, Base
from app.core.security import create_access_token
from app.models import category, expense, goal, contribution, milestone, notification, preferences  # noqa: F401
from app.models.user import User

async def create_user():
    print("Creating user...")

    email = input("Enter email: ") or "saver@example.com"
    full_name = input("Enter full name (optional): ") or None

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        try:
            result = await session.execute(select(User).where(User.email == email))
            user = result.scalars().first()
            if user:
                print(f"User with email {email} already exists, issuing a new token")
            else:
                user = User(email=email, full_name=full_name)
                session.add(user)
                await session.commit()
                await session.refresh(user)
                print("✅ User created successfully!")

            print(f"📧 Email: {user.email}")
            print(f"🔑 ID: {user.id}")
            print(f"🎟️ Token: {create_access_token(str(user.id))}")
        except Exception as e:
            print(f"❌ Error creating user: {e}")
        finally:
            await engine.dispose()

if __name__ == "__main__":
    asyncio.run(create_user())
