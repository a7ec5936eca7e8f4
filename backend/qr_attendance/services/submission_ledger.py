"""Per-session submission records and their export views."""
import csv
import io
from typing import List, Optional

import pandas as pd

from qr_attendance.records import Submission, SubmissionView
from qr_attendance.stores.base import AttendanceStore
from qr_attendance.utils.clock import SystemClock

CSV_HEADER = ['Student ID', 'Timestamp', 'Verified', 'Liveness Action']


class SubmissionLedger:
    """Admits at most one submission per (session, student)."""

    def __init__(self, store: AttendanceStore, clock: Optional[SystemClock] = None):
        self.store = store
        self.clock = clock or SystemClock()

    def admit(self, session_id: str, student_id: str, record: Submission) -> Submission:
        """Insert ``record`` for the pair or raise DuplicateSubmission.

        ``record`` supplies the optional payload; the pair and the timestamp
        are set here.
        """
        submission = record.copy(
            id=None,
            session_id=session_id,
            student_id=student_id,
            timestamp=record.timestamp or self.clock.now()
        )
        return self.store.insert_submission(submission)

    def list(self, session_id: str, class_id: Optional[int] = None) -> List[SubmissionView]:
        """Submissions, most recent first, with roster names when available."""
        submissions = self.store.list_submissions(session_id)
        if class_id is None or not submissions:
            return [SubmissionView(submission=s) for s in submissions]

        roster = self.store.roster_lookup(class_id, {s.student_id for s in submissions})
        views = []
        for submission in submissions:
            entry = roster.get(submission.student_id)
            views.append(SubmissionView(
                submission=submission,
                student_name=entry.name if entry else None,
                student_email=entry.email if entry else None
            ))
        return views

    def count(self, session_id: str) -> int:
        return self.store.count_submissions(session_id)

    def to_csv(self, session_id: str) -> str:
        """Export with a fixed header; every cell quoted."""
        rows = [
            {
                'Student ID': s.student_id,
                'Timestamp': s.timestamp.isoformat(),
                'Verified': 'Yes' if s.verified else 'No',
                'Liveness Action': s.liveness_action or '-'
            }
            for s in self.store.list_submissions(session_id)
        ]
        df = pd.DataFrame(rows, columns=CSV_HEADER)

        output = io.StringIO()
        df.to_csv(output, index=False, quoting=csv.QUOTE_ALL, lineterminator='\n')
        return output.getvalue()

    @staticmethod
    def csv_filename(session_id: str) -> str:
        return f"attendance-{session_id}.csv"
