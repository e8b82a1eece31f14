# scripts/db_check.py
from sqlalchemy import text

from reflet.db.session import ENGINE_URL, engine

with engine.connect() as conn:
    conn.execute(text("select 1")).scalar_one()
    print("OK DB:", engine.url.render_as_string(hide_password=True))
    print("Dialect:", engine.dialect.name, "| normalized from DATABASE_URL:", ENGINE_URL.split(":", 1)[0])
