"""Test environment: set before app modules build their settings."""

import os

os.environ["APP_ENV"] = "dev"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-signing-key-with-at-least-32-bytes!"
os.environ["BCRYPT_ROUNDS"] = "4"
