from __future__ import annotations

from datetime import date, datetime, time

from src.shiftdesk.shiftdesk.submissions.model import ShiftSlot
from src.shiftdesk.shiftdesk.submissions.mysql_submission_repository import MySQLSubmissionRepository
from src.shiftdesk.shiftdesk.tokens.payloads import ShiftRequestData

NOW = datetime(2024, 3, 1, 9, 0, 0)


class RecordingCursor:
    def __init__(self, conn):
        self._conn = conn
        self.rowcount = 1
        self.lastrowid = 41

    def execute(self, sql, params=()):
        self._conn.statements.append((" ".join(sql.split()), params))

    def close(self):
        pass


class RecordingConnection:
    def __init__(self):
        self.statements: list[tuple[str, tuple]] = []
        self.committed = False

    def cursor(self, dictionary=True):
        return RecordingCursor(self)

    def commit(self):
        self.committed = True

    def rollback(self):
        pass

    def close(self):
        pass


class RecordingFactory:
    def __init__(self):
        self.conn = RecordingConnection()

    def connect(self, **_):
        return self.conn


def test_shift_request_insert_keeps_the_picked_open_shift():
    factory = RecordingFactory()
    repo = MySQLSubmissionRepository(factory)
    slot = ShiftSlot(
        shift_date=date(2024, 3, 5),
        start_time=time(9, 0),
        end_time=time(13, 0),
        branch_preference="Harbor",
        available_shift_id=7,
    )

    request = repo.create_request_consuming_token(
        token_id=3, employee_id=1, slot=slot, submitted_data=ShiftRequestData(slot=slot), now=NOW
    )

    assert request.request_id == 41
    assert factory.conn.committed
    sql, params = factory.conn.statements[-1]
    assert sql.startswith("INSERT INTO shift_requests(")
    columns = [c.strip() for c in sql.split("(", 1)[1].split(")", 1)[0].split(",")]
    assert len(columns) == len(params)
    assert params[columns.index("available_shift_id")] == 7
    assert params[columns.index("branch_preference")] == "Harbor"
