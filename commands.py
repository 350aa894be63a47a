# Quick reference commands (run from repo root). These are comments only; copy/paste as needed.

# Install the project with test dependencies
# python -m pip install -e ".[test]"

# Run the full test suite
# python -m pytest

# Run focused test files
# python -m pytest tests/test_validation.py
# python -m pytest tests/test_jobs_store.py tests/test_notifications.py
# python -m pytest tests/test_routes_admin.py tests/test_routes_public.py

# Postgres store tests (skipped without DATABASE_URL)
# DATABASE_URL=postgresql://... python -m pytest tests/test_postgres_store.py

# Start the site locally with the in-memory store and sample jobs
# STORE_BACKEND=memory SEED_SAMPLE_JOBS=1 ADMIN_EMAILS=you@example.com python main.py

# Start against Postgres (env vars from .env)
# python -m dotenv run -- python -m uvicorn app.api:app --reload

# Inspect the documents table
# python scripts/db_shell.py
# python scripts/db_shell.py jobs

# Seed sample jobs / rewrite legacy contract types (idempotent)
# python scripts/seed_jobs.py
# python scripts/migrate_contract_types.py
