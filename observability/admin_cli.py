"""Lightweight CLI helpers for inspecting stored interviews and feedback."""
from __future__ import annotations

import argparse
from typing import List, Optional

from config.settings import settings
from storage import FEEDBACK, INTERVIEWS, DocumentStore, open_store


def tail_interviews(store: DocumentStore, limit: int = 20) -> List[str]:
    lines = []
    for doc in store.query(INTERVIEWS, order_by="createdAt", descending=True, limit=limit):
        state = "finalized" if doc.get("finalized") else "open"
        questions = len(doc.get("questions") or [])
        lines.append(
            f"[{doc.get('createdAt')}] {doc['id']} user={doc.get('userId')} role={doc.get('role') or '-'} "
            f"{state} questions={questions}"
        )
    return lines


def tail_feedback(store: DocumentStore, limit: int = 20) -> List[str]:
    lines = []
    for doc in store.query(FEEDBACK, order_by="createdAt", descending=True, limit=limit):
        lines.append(
            f"[{doc.get('createdAt')}] {doc['id']} interview={doc.get('interviewId')} "
            f"user={doc.get('userId')} total={doc.get('totalScore')}"
        )
    return lines


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--db", default=settings.DB_PATH, help="Path to the SQLite document store")
    parser.add_argument("--tail-interviews", type=int, help="Show the latest interviews")
    parser.add_argument("--tail-feedback", type=int, help="Show the latest feedback records")
    args = parser.parse_args(argv)

    store = open_store(args.db)
    if args.tail_interviews:
        for line in tail_interviews(store, args.tail_interviews):
            print(line)
    if args.tail_feedback:
        for line in tail_feedback(store, args.tail_feedback):
            print(line)


if __name__ == "__main__":
    main()
