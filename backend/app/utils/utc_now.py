from datetime import datetime, timezone


def utc_now() -> datetime:
  """Timezone-aware current time, used for asset creation stamps."""

  return datetime.now(timezone.utc)
