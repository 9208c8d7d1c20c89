from __future__ import annotations

import json
import logging
from datetime import datetime, timezone


def log_action(
    logger: logging.Logger,
    module: str,
    action: str,
    transaction_id: int | None,
    outcome: str,
    **context: object,
) -> None:
    logger.info(
        json.dumps(
            {
                "ts": datetime.now(timezone.utc).isoformat(),
                "level": "INFO",
                "module": module,
                "action": action,
                "transaction_id": transaction_id,
                "outcome": outcome,
                **context,
            },
            default=str,
        )
    )
