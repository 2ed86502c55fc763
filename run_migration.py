#!/usr/bin/env python3
"""Apply the SQL migrations in migrations/ to the journal database."""

import os
import sys
from pathlib import Path

from dotenv import load_dotenv

MIGRATIONS_DIR = Path(__file__).parent / 'migrations'


def main():
    load_dotenv()
    conn_str = os.getenv('DATABASE_URL')
    if not conn_str:
        print("DATABASE_URL is not set")
        sys.exit(1)

    # Optional argument: run a single migration file by name
    names = sys.argv[1:] or sorted(p.name for p in MIGRATIONS_DIR.glob('*.sql'))

    import psycopg2

    print("Connecting to database...")
    conn = psycopg2.connect(conn_str)
    conn.autocommit = True
    cur = conn.cursor()

    try:
        for name in names:
            migration_path = MIGRATIONS_DIR / name
            print(f"Reading migration from: {migration_path}")
            sql = migration_path.read_text()
            print(f"SQL length: {len(sql)} chars")
            cur.execute(sql)
            print(f"✅ {name} executed successfully!")

        for table in ('entries', 'chat_messages', 'analyses', 'user_analysis_state', 'question_cursor'):
            cur.execute(
                "SELECT column_name, data_type FROM information_schema.columns "
                "WHERE table_name = %s ORDER BY ordinal_position",
                (table,),
            )
            print(f"\n{table} table columns:")
            for col_name, col_type in cur.fetchall():
                print(f"  - {col_name}: {col_type}")
    finally:
        cur.close()
        conn.close()


if __name__ == '__main__':
    main()
