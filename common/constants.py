"""Project-wide constants (payload ceiling, buffered read size)."""

MAX_FRAGMENT_SIZE_BYTES: int = 5 * 1024 * 1024  # 5 MiB upload/read ceiling
READ_PIECE_SIZE_BYTES: int = 64 * 1024
