from stake_hub.history.log import HISTORY_LIMIT, HistoryEntry, HistoryKind, HistoryLog

__all__ = ["HISTORY_LIMIT", "HistoryEntry", "HistoryKind", "HistoryLog"]
