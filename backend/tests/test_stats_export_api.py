from schoolgrid.core.calendar import DAY_TOKENS

CSV_HEADER = "Day,Period,Time,Teacher,Subject,Grade,Section,Room"


def seed(client, make_payload, grid):
    for payload in (
        make_payload(day="monday", subject="Algebra"),
        make_payload(teacher_id=grid.t2.id, section_id=grid.section_y.id, room_id=grid.room_b.id, subject="Biology"),
    ):
        assert client.post("/api/schedule/", json=payload).status_code == 201


def test_stats_endpoints(client, grid, make_payload):
    seed(client, make_payload, grid)

    teachers = client.get("/api/stats/teachers").json()
    assert [(item["teacher_name"], item["utilization_percentage"]) for item in teachers] == [
        ("Amal Haddad", 25),
        ("Omar Saleh", 5),
    ]

    rooms = client.get("/api/stats/rooms").json()
    assert {item["room_name"]: item["scheduled_periods"] for item in rooms} == {"Room A": 1, "Room B": 1}

    overview = client.get("/api/stats/overview").json()
    assert overview["total_schedule_entries"] == 2
    assert list(overview["entries_by_day"]) == [day.value for day in DAY_TOKENS]

    slots = client.get("/api/stats/unused-slots").json()
    # 5 days x 2 periods, and no cell has both rooms and both teachers booked.
    assert len(slots) == 10
    sunday_first = slots[0]
    assert (sunday_first["day"], sunday_first["period_number"]) == ("sunday", 1)
    assert [room["name"] for room in sunday_first["available_rooms"]] == ["Room A"]
    assert [teacher["name"] for teacher in sunday_first["available_teachers"]] == ["Amal Haddad"]


def test_csv_export_of_empty_grid_is_header_only(client):
    response = client.get("/api/export/csv")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "attachment" in response.headers["content-disposition"]
    assert response.content.startswith(b"\xef\xbb\xbf")
    assert response.content.decode("utf-8-sig").splitlines() == [CSV_HEADER]


def test_csv_export_rows_follow_week_order(client, grid, make_payload):
    seed(client, make_payload, grid)

    lines = client.get("/api/export/csv").content.decode("utf-8-sig").splitlines()

    assert lines[0] == CSV_HEADER
    assert lines[1] == "Sunday,1,08:00 - 08:45,Omar Saleh,Biology,Grade 7,B,Room B"
    assert lines[2] == "Monday,1,08:00 - 08:45,Amal Haddad,Algebra,Grade 7,A,Room A"


def test_json_export_applies_filters(client, grid, make_payload):
    seed(client, make_payload, grid)

    everything = client.get("/api/export/json").json()
    assert everything["count"] == 2
    assert "exported_at" in everything

    filtered = client.get("/api/export/json", params={"teacher_id": grid.t1.id}).json()
    assert filtered["count"] == 1
    row = filtered["data"][0]
    assert row["day_label"] == "Monday"
    assert row["teacher_subject"] == "Math"
    assert row["subject"] == "Algebra"

    assert client.get("/api/export/json", params={"day": "friday"}).status_code == 422


def test_weekly_export_ignores_day_filter(client, grid, make_payload):
    seed(client, make_payload, grid)

    body = client.get("/api/export/weekly", params={"day": "sunday"}).json()

    assert list(body["schedule"]) == [day.value for day in DAY_TOKENS]
    assert [row["subject"] for row in body["schedule"]["monday"]] == ["Algebra"]
    assert [row["subject"] for row in body["schedule"]["sunday"]] == ["Biology"]
    assert body["schedule"]["thursday"] == []
