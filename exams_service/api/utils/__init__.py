"""API helpers: orjson responses and envelope builders."""
