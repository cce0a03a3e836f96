from __future__ import annotations

import secrets

# No I, L, O, 0 or 1 so codes survive being read aloud or retyped.
CODE_ALPHABET = "ABCDEFGHJKMNPQRSTUVWXYZ23456789"


def generate_raw_codes(
    *,
    count: int,
    token_length: int = 10,
    existing_codes: set[str] | None = None,
) -> list[str]:
    if count <= 0:
        raise ValueError("count must be positive")
    if token_length <= 0:
        raise ValueError("token_length must be positive")

    existing = existing_codes if existing_codes is not None else set()
    generated: list[str] = []
    attempts = 0
    max_attempts = max(100, count * 50)

    while len(generated) < count:
        attempts += 1
        if attempts > max_attempts:
            raise RuntimeError("unable to generate unique redemption codes")

        token = "".join(secrets.choice(CODE_ALPHABET) for _ in range(token_length))
        if token in existing:
            continue

        existing.add(token)
        generated.append(token)

    return generated
