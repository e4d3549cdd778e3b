"""
Shared fixtures: a small exported practice data set.
"""

import json

import pytest


@pytest.fixture
def schedule_data():
    """Two schools; Lincoln has a weekly group and a logged session on Monday 2024-11-25."""
    return {
        "schools": [
            {"id": "sch-1", "name": "Lincoln Elementary", "schoolHours": {"startHour": 8, "endHour": 15}},
            {"id": "sch-2", "name": "Roosevelt Middle"},
        ],
        "students": [
            {"id": "stu-1", "name": "Avery", "school": "Lincoln Elementary"},
            {"id": "stu-2", "name": "Jordan", "school": "Lincoln Elementary"},
            {"id": "stu-3", "name": "Riley", "school": "Roosevelt Middle"},
        ],
        "scheduledSessions": [
            {
                "id": "ss-1",
                "studentIds": ["stu-1", "stu-2"],
                "startTime": "10:00",
                "endTime": "10:30",
                "recurrencePattern": "weekly",
                "dayOfWeek": [1, 3],
                "startDate": "2024-09-03",
                "active": True,
            },
            {
                "id": "ss-2",
                "studentIds": ["stu-3"],
                "startTime": "09:00",
                "duration": 45,
                "recurrencePattern": "daily",
                "startDate": "2024-09-03",
            },
            {
                "id": "ss-3",
                "studentIds": ["stu-2"],
                "startTime": "",
                "recurrencePattern": "daily",
                "startDate": "2024-09-03",
            },
        ],
        "sessions": [
            {
                "id": "se-1",
                "studentId": "stu-2",
                "date": "2024-11-25T19:00:00.000Z",
                "endTime": "2024-11-25T19:30:00.000Z",
                "missedSession": False,
            },
            {
                "id": "se-2",
                "studentId": "stu-3",
                "date": "2024-11-25T20:00:00.000Z",
            },
        ],
    }


@pytest.fixture
def data_file(tmp_path, schedule_data):
    path = tmp_path / "schedule_data.json"
    path.write_text(json.dumps(schedule_data), encoding="utf-8")
    return path


@pytest.fixture
def config_file(tmp_path, data_file):
    path = tmp_path / "config.yaml"
    path.write_text(
        "timezone: America/Chicago\n"
        f"data_file: {data_file.name}\n"
        "defaults:\n"
        "  session_minutes: 30\n",
        encoding="utf-8",
    )
    return path
