from datetime import date

from app.db import crud


async def test_create_and_get_user(db):
    user = await crud.create_user(db, "  Ops@Example.com ", "hash", display_name="Ops")
    assert user.id is not None
    assert user.email == "ops@example.com"
    assert user.role == "operator"

    fetched = await crud.get_user_by_email(db, "ops@example.com")
    assert fetched.id == user.id


async def test_list_operators_excludes_admins_and_inactive(db, admin, operator, other_operator):
    other_operator.is_active = False
    await db.commit()
    operators = await crud.list_operators(db)
    assert [u.id for u in operators] == [operator.id]


async def test_job_order_filters(db, job_factory, operator, other_operator):
    await job_factory("J-1", operator.id, scheduled_date=date(2026, 10, 19))
    await job_factory("J-2", operator.id, scheduled_date=date(2026, 10, 20), status="completed")
    await job_factory("J-3", other_operator.id, scheduled_date=date(2026, 10, 19))

    mine = await crud.list_job_orders(db, assigned_to=operator.id)
    assert {j.job_number for j in mine} == {"J-1", "J-2"}

    today = await crud.list_job_orders(db, scheduled_date=date(2026, 10, 19))
    assert {j.job_number for j in today} == {"J-1", "J-3"}

    done = await crud.list_job_orders(db, status="completed")
    assert [j.job_number for j in done] == ["J-2"]

    assert (await crud.get_job_order_by_number(db, "J-3")).assigned_to == other_operator.id


async def test_active_jobs_for_operator(db, job_factory, operator):
    a = await job_factory("J-10", operator.id, status="in_route")
    await job_factory("J-11", operator.id, status="completed")

    active = await crud.list_active_jobs_for_operator(db, operator.id)
    assert [j.id for j in active] == [a.id]
    assert await crud.list_active_jobs_for_operator(db, operator.id, exclude_job_id=a.id) == []


async def test_update_job_order_skips_none(db, job):
    job = await crud.update_job_order(db, job, notes="Gate code 4411", contact_phone=None)
    assert job.notes == "Gate code 4411"
    assert job.contact_phone == "(555) 123-4567"


async def test_step_submissions(db, job, operator):
    await crud.create_step_submission(db, job.id, "pictures", operator.id, {"photos": ["a.jpg"]})
    await crud.create_step_submission(db, job.id, "customer_signature", operator.id, {"signer_name": "Dana"})

    assert len(await crud.list_step_submissions(db, job.id)) == 2
    [pics] = await crud.list_step_submissions(db, job.id, "pictures")
    assert pics.payload == {"photos": ["a.jpg"]}


async def test_open_standby_lookup(db, job, operator):
    log = await crud.create_standby_log(db, job_order_id=job.id, operator_id=operator.id, reason="Rain")
    assert (await crud.get_open_standby_log(db, operator.id, job.id)).id == log.id

    await crud.update_standby_log(db, log, ended_at=log.started_at, status="completed")
    assert await crud.get_open_standby_log(db, operator.id, job.id) is None
