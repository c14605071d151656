"""
Worker App - Person Queue Consumer

Responsibilities:
- Ensure the PostgreSQL persons table exists on startup
- Pop person records from the Redis list (default: persons_queue)
- Decode the JSON wire format (FirstName, LastName, Address, CreatedAt)
- Insert each record into the persons table
- Back off 1s on an empty queue and 5s after a failed item

Database Schema:
- persons(id SERIAL, first_name VARCHAR(100), last_name VARCHAR(100),
  address TEXT, created_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP)
"""
