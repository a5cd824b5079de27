# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Transaction Logger

Single responsibility: log and retrieve installation reports (append-only JSONL)
"""

import json
import logging
import threading
import uuid
from pathlib import Path
from typing import List, Dict, Any, Optional

from module_resolver.models.module_models import InstallationReport

logger = logging.getLogger(__name__)


def new_transaction_id() -> str:
    return f"txn-{uuid.uuid4().hex[:12]}"


class TransactionLogger:
    """Manages transaction logging to append-only JSONL file"""

    def __init__(self, log_file: Path):
        """
        Initialize transaction logger.

        Args:
            log_file: Path to installations.jsonl
        """
        self.log_file = Path(log_file)
        self._lock = threading.Lock()

        # Ensure log file exists
        self.log_file.parent.mkdir(parents=True, exist_ok=True)
        if not self.log_file.exists():
            self.log_file.touch()

    def log(self, report: InstallationReport):
        """
        Append installation report to JSONL log file.

        Args:
            report: Installation report to log
        """
        log_line = json.dumps(report.to_dict())
        with self._lock:
            with open(self.log_file, "a") as f:
                f.write(log_line + "\n")

    def list_transactions(self, limit: int = 50) -> List[Dict[str, Any]]:
        """
        List recent transactions from log.

        Args:
            limit: Maximum number of transactions to return

        Returns:
            List of report dicts (most recent first)
        """
        transactions = self._read_all()

        # Return most recent first
        return list(reversed(transactions[-limit:])) if limit > 0 else []

    def get_transaction(self, transaction_id: str) -> Optional[Dict[str, Any]]:
        """
        Get a specific transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Report dict or None if not found
        """
        for txn in self._read_all():
            if txn.get("id") == transaction_id:
                return txn
        return None

    def _read_all(self) -> List[Dict[str, Any]]:
        if not self.log_file.exists():
            return []

        transactions = []
        with open(self.log_file, "r") as f:
            for line in f:
                if not line.strip():
                    continue
                try:
                    transactions.append(json.loads(line))
                except json.JSONDecodeError as e:
                    logger.error(f"Failed to parse transaction log line: {e}")
        return transactions
