import os

import psycopg2
from dotenv import load_dotenv

load_dotenv()

try:
    conn = psycopg2.connect(os.environ["DATABASE_URL"], connect_timeout=5)  # Fail fast if unreachable
    print("✅ Connection successful!")
except KeyError:
    print("❌ DATABASE_URL is not set")
except Exception as e:
    print(f"❌ Connection failed: {e}")
finally:
    if 'conn' in locals():
        conn.close()
