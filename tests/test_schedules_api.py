"""Testes dos endpoints de horários semanais (leitura e substituição em lote)."""

from datetime import datetime, timedelta

import pytest
from sqlmodel import select

from schedulizer.models.schedule import Schedule, SchedulePeriod
from schedulizer.models.subscription import Subscription

from conftest import headers_for, make_owner


def _put(client, service_id, headers, schedules):
    return client.put(f"/services/{service_id}/schedules", json={"schedules": schedules}, headers=headers)


def _day(day, *periods, active=True):
    return {
        "dayOfWeek": day,
        "isActive": active,
        "periods": [{"startTime": s, "endTime": e} for s, e in periods],
    }


def test_new_service_has_a_closed_week(client, service, auth_headers):
    resp = client.get(f"/services/{service.id}/schedules", headers=auth_headers)
    assert resp.status_code == 200
    week = resp.json()
    assert [d["dayOfWeek"] for d in week] == list(range(7))
    assert all(d["isActive"] is False and d["periods"] == [] for d in week)


def test_creating_service_through_api_creates_seven_days(client, session, auth_headers):
    resp = client.post(
        "/services/",
        json={"name": "Barba", "duration_minutes": 20, "price": 30.0},
        headers=auth_headers,
    )
    assert resp.status_code == 201
    service_id = resp.json()["id"]
    rows = session.exec(select(Schedule).where(Schedule.service_id == service_id)).all()
    assert sorted(r.day_of_week for r in rows) == list(range(7))


def test_replace_week(client, service, auth_headers):
    resp = _put(client, service.id, auth_headers, [
        _day(1, ("14:00", "18:00"), ("08:00", "12:00")),
        _day(2, ("08:00", "12:00"), ("12:00", "18:00")),
    ])
    assert resp.status_code == 200
    week = {d["dayOfWeek"]: d for d in resp.json()}
    assert week[1]["isActive"] is True
    assert [(p["startTime"], p["endTime"]) for p in week[1]["periods"]] == [
        ("08:00", "12:00"),
        ("14:00", "18:00"),
    ]
    assert len(week[2]["periods"]) == 2
    assert week[0]["isActive"] is False


def test_replace_overwrites_previous_periods(client, service, auth_headers):
    _put(client, service.id, auth_headers, [_day(3, ("08:00", "12:00"), ("13:00", "17:00"))])
    resp = _put(client, service.id, auth_headers, [_day(3, ("10:00", "11:00"))])
    day3 = resp.json()[3]
    assert [(p["startTime"], p["endTime"]) for p in day3["periods"]] == [("10:00", "11:00")]


def test_partial_batch_leaves_other_days_untouched(client, service, auth_headers):
    _put(client, service.id, auth_headers, [_day(1, ("08:00", "12:00")), _day(5, ("09:00", "10:00"))])
    resp = _put(client, service.id, auth_headers, [_day(1, active=False)])
    week = resp.json()
    assert week[1]["isActive"] is False
    assert week[1]["periods"] == []
    assert week[5]["isActive"] is True
    assert week[5]["periods"][0]["startTime"] == "09:00"


def test_overlap_rejects_whole_batch(client, session, service, auth_headers):
    _put(client, service.id, auth_headers, [_day(1, ("08:00", "12:00"))])

    resp = _put(client, service.id, auth_headers, [
        _day(1, ("07:00", "09:00")),
        _day(2, ("08:00", "14:00"), ("13:00", "18:00")),
    ])
    assert resp.status_code == 400
    assert "dia 2" in resp.json()["detail"]

    week = client.get(f"/services/{service.id}/schedules", headers=auth_headers).json()
    assert week[1]["periods"][0]["startTime"] == "08:00"
    assert week[2]["isActive"] is False
    assert len(session.exec(select(SchedulePeriod)).all()) == 1


def test_adjacent_periods_are_accepted(client, service, auth_headers):
    resp = _put(client, service.id, auth_headers, [_day(3, ("08:00", "12:00"), ("12:00", "18:00"))])
    assert resp.status_code == 200


def test_malformed_payload_is_422(client, service, auth_headers):
    resp = _put(client, service.id, auth_headers, [_day(1, ("8:00", "12:00"))])
    assert resp.status_code == 422
    resp = _put(client, service.id, auth_headers, [_day(9, ("08:00", "12:00"))])
    assert resp.status_code == 422


def test_missing_day_rows_are_filled_as_closed(client, session, service, auth_headers):
    for row in session.exec(select(Schedule).where(Schedule.service_id == service.id)).all():
        session.delete(row)
    session.commit()

    week = client.get(f"/services/{service.id}/schedules", headers=auth_headers).json()
    assert len(week) == 7
    assert all(d["isActive"] is False for d in week)

    resp = _put(client, service.id, auth_headers, [_day(4, ("09:00", "10:00"))])
    assert resp.json()[4]["isActive"] is True


def test_other_organization_service_is_404(client, session, service):
    stranger = make_owner(session, "stranger@example.com", "other-org")
    headers = headers_for(stranger)
    assert client.get(f"/services/{service.id}/schedules", headers=headers).status_code == 404
    assert _put(client, service.id, headers, [_day(1, ("08:00", "09:00"))]).status_code == 404


def test_requires_authentication(client, service):
    assert client.get(f"/services/{service.id}/schedules").status_code == 401


def test_expired_subscription_is_blocked(client, session, service, owner, auth_headers):
    subscription = session.exec(
        select(Subscription).where(Subscription.organization_id == owner.organization_id)
    ).one()
    subscription.current_period_end = datetime.utcnow() - timedelta(days=1)
    session.add(subscription)
    session.commit()

    resp = client.get(f"/services/{service.id}/schedules", headers=auth_headers)
    assert resp.status_code == 403


def test_cancelled_subscription_is_blocked(client, session, service):
    owner = make_owner(session, "late@example.com", "late-payer", subscription_status="canceled")
    resp = client.get("/services/", headers=headers_for(owner))
    assert resp.status_code == 403


def test_write_failure_rolls_back_whole_batch(client, session, service, auth_headers, monkeypatch):
    for row in session.exec(
        select(Schedule).where(Schedule.service_id == service.id, Schedule.day_of_week.in_([4, 5]))
    ).all():
        session.delete(row)
    session.commit()

    real_flush = session.flush

    def failing_flush(*args, **kwargs):
        # falha ao gravar o segundo dia novo do lote
        if any(isinstance(obj, Schedule) and obj.day_of_week == 5 for obj in session.new):
            raise RuntimeError("falha de escrita")
        return real_flush(*args, **kwargs)

    monkeypatch.setattr(session, "flush", failing_flush)

    with pytest.raises(RuntimeError):
        _put(client, service.id, auth_headers, [
            _day(1, ("08:00", "12:00")),
            _day(4, ("09:00", "10:00")),
            _day(5, ("09:00", "10:00")),
        ])

    monkeypatch.undo()

    days = {s.day_of_week: s for s in session.exec(select(Schedule).where(Schedule.service_id == service.id)).all()}
    assert 4 not in days and 5 not in days
    assert days[1].is_active is False
    assert session.exec(select(SchedulePeriod)).all() == []
