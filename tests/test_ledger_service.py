import asyncio

import pytest

from cv_ledger.domains.ledger.events import LikeSet
from cv_ledger.domains.ledger.exceptions import AlreadyLiked, InvalidInput, NotFound, Unauthorized
from cv_ledger.domains.ledger.services import LedgerService

from tests.conftest import END_DATE, OTHER_VIEWER, OWNER, START_DATE, VIEWER


async def assert_counters_consistent(ledger: LedgerService):
    """TotalLikes равен сумме лайков неудаленных кейсов, а likes числу регистраций"""
    cases = await ledger.get_cases()

    assert await ledger.get_total_likes() == sum(case.likes for case in cases)
    assert await ledger.get_total_cases() == len(cases)
    for case in cases:
        assert await ledger.ledger_repository.count_likes(case.id) == case.likes
    assert [case.id for case in cases] == sorted(case.id for case in cases)


class TestBootstrap:

    async def test_initial_state(self, ledger):
        assert await ledger.get_owner() == OWNER
        assert await ledger.get_main_info() == ""
        assert await ledger.get_total_likes() == 0
        assert await ledger.get_total_cases() == 0
        assert await ledger.get_cases() == []

    async def test_owner_is_fixed_at_first_bootstrap(self, ledger):
        state = await ledger.bootstrap("someone-else")

        assert state.owner == OWNER
        assert await ledger.get_owner() == OWNER

    async def test_operations_require_bootstrap(self, session, lock, events):
        service = LedgerService(session, lock=lock, events=events)

        with pytest.raises(RuntimeError):
            await service.get_main_info()


class TestMainInfo:

    async def test_owner_overwrites_main_info(self, ledger):
        await ledger.update_main_info(OWNER, '{"about": "Hello there!", "contacts": {"tg": "/user"}}')
        await ledger.update_main_info(OWNER, '{"about": "Web3 CV"}')

        assert await ledger.get_main_info() == '{"about": "Web3 CV"}'

    async def test_owner_can_clear_main_info(self, ledger):
        await ledger.update_main_info(OWNER, "something")
        await ledger.update_main_info(OWNER, "")

        assert await ledger.get_main_info() == ""

    async def test_main_info_is_not_parsed(self, ledger):
        await ledger.update_main_info(OWNER, "{not json")

        assert await ledger.get_main_info() == "{not json"

    async def test_non_owner_cannot_update(self, ledger):
        await ledger.update_main_info(OWNER, "original")

        with pytest.raises(Unauthorized) as excinfo:
            await ledger.update_main_info(VIEWER, "hijacked")

        assert str(excinfo.value) == "caller is not the owner"
        assert await ledger.get_main_info() == "original"


class TestCases:

    async def test_add_case(self, ledger, case_info):
        case_id = await ledger.add_case(OWNER, case_info, START_DATE, END_DATE)

        case = await ledger.get_case(case_id)
        assert case_id == 1
        assert case.info == case_info
        assert case.start_date == START_DATE
        assert case.end_date == END_DATE
        assert case.likes == 0

    async def test_ids_are_sequential_across_deletes(self, ledger):
        first = await ledger.add_case(OWNER, "a", 100, 0)
        second = await ledger.add_case(OWNER, "b", 100, 0)
        await ledger.remove_case(OWNER, second)
        third = await ledger.add_case(OWNER, "c", 100, 0)
        await ledger.remove_case(OWNER, first)
        await ledger.remove_case(OWNER, third)
        fourth = await ledger.add_case(OWNER, "d", 100, 0)

        assert [first, second, third, fourth] == [1, 2, 3, 4]

    async def test_zero_start_date_does_not_consume_id(self, ledger):
        with pytest.raises(InvalidInput):
            await ledger.add_case(OWNER, "info", 0, 500)

        assert await ledger.add_case(OWNER, "info", 100, 500) == 1

    async def test_non_owner_cannot_add(self, ledger):
        with pytest.raises(Unauthorized):
            await ledger.add_case(VIEWER, "info", START_DATE, END_DATE)

        assert await ledger.get_total_cases() == 0
        assert await ledger.add_case(OWNER, "info", START_DATE, END_DATE) == 1

    async def test_owner_check_comes_before_validation(self, ledger):
        with pytest.raises(Unauthorized):
            await ledger.add_case(VIEWER, "info", 0, END_DATE)

    async def test_end_before_start_is_accepted(self, ledger):
        case_id = await ledger.add_case(OWNER, "info", 500, 100)

        case = await ledger.get_case(case_id)
        assert (case.start_date, case.end_date) == (500, 100)

    async def test_update_case_keeps_likes(self, ledger, case_info):
        case_id = await ledger.add_case(OWNER, case_info, START_DATE, END_DATE)
        await ledger.set_like(VIEWER, case_id)

        updated = await ledger.update_case(OWNER, case_id, '{"name": "On-chain CV"}', START_DATE + 1, 0)

        case = await ledger.get_case(case_id)
        assert updated.likes == 1
        assert case.id == case_id
        assert case.info == '{"name": "On-chain CV"}'
        assert case.start_date == START_DATE + 1
        assert case.end_date == 0
        assert case.likes == 1
        await assert_counters_consistent(ledger)

    async def test_update_case_rejects_zero_start(self, ledger, case_info):
        case_id = await ledger.add_case(OWNER, case_info, START_DATE, END_DATE)

        with pytest.raises(InvalidInput):
            await ledger.update_case(OWNER, case_id, "changed", 0, END_DATE)

        case = await ledger.get_case(case_id)
        assert case.info == case_info
        assert case.start_date == START_DATE

    async def test_update_unknown_case(self, ledger):
        with pytest.raises(NotFound) as excinfo:
            await ledger.update_case(OWNER, 1, "info", START_DATE, END_DATE)

        assert str(excinfo.value) == "case deleted or invalid ID"

    async def test_update_deleted_case(self, ledger):
        case_id = await ledger.add_case(OWNER, "info", START_DATE, END_DATE)
        await ledger.remove_case(OWNER, case_id)

        with pytest.raises(NotFound):
            await ledger.update_case(OWNER, case_id, "info", START_DATE, END_DATE)

    async def test_non_owner_cannot_update(self, ledger):
        case_id = await ledger.add_case(OWNER, "info", START_DATE, END_DATE)

        with pytest.raises(Unauthorized):
            await ledger.update_case(VIEWER, case_id, "changed", START_DATE, END_DATE)

        assert (await ledger.get_case(case_id)).info == "info"

    async def test_get_cases_skips_deleted(self, ledger):
        await ledger.add_case(OWNER, '{"name": "case1"}', 1674172800, 0)
        await ledger.add_case(OWNER, '{"name": "case2"}', 1676851200, 0)
        await ledger.add_case(OWNER, '{"name": "case3"}', 1679270400, 0)

        await ledger.remove_case(OWNER, 2)

        cases = await ledger.get_cases()
        assert [case.id for case in cases] == [1, 3]
        assert cases[0].start_date == 1674172800
        assert cases[1].start_date == 1679270400
        assert await ledger.get_total_cases() == 2


class TestRemoveCase:

    async def test_removed_case_is_unreachable(self, ledger):
        case_id = await ledger.add_case(OWNER, "info", START_DATE, END_DATE)
        await ledger.remove_case(OWNER, case_id)

        with pytest.raises(NotFound):
            await ledger.get_case(case_id)
        with pytest.raises(NotFound):
            await ledger.set_like(VIEWER, case_id)
        with pytest.raises(NotFound):
            await ledger.remove_case(OWNER, case_id)
        with pytest.raises(NotFound):
            await ledger.update_case(OWNER, case_id, "info", START_DATE, END_DATE)

    async def test_remove_withdraws_likes(self, ledger):
        first = await ledger.add_case(OWNER, "a", START_DATE, 0)
        second = await ledger.add_case(OWNER, "b", START_DATE, 0)
        await ledger.set_like(VIEWER, first)
        await ledger.set_like(OTHER_VIEWER, first)
        await ledger.set_like(OWNER, first)
        await ledger.set_like(VIEWER, second)
        assert await ledger.get_total_likes() == 4

        await ledger.remove_case(OWNER, first)

        assert await ledger.get_total_likes() == 1
        await assert_counters_consistent(ledger)

    async def test_remove_unknown_case(self, ledger):
        await ledger.add_case(OWNER, "info", START_DATE, END_DATE)

        with pytest.raises(NotFound):
            await ledger.remove_case(OWNER, 2)

    async def test_non_owner_cannot_remove(self, ledger):
        case_id = await ledger.add_case(OWNER, "info", START_DATE, END_DATE)

        with pytest.raises(Unauthorized):
            await ledger.remove_case(VIEWER, case_id)

        assert await ledger.get_total_cases() == 1


class TestLikes:

    async def test_set_like(self, ledger, received_events):
        case_id = await ledger.add_case(OWNER, "info", START_DATE, END_DATE)

        case = await ledger.set_like(VIEWER, case_id)

        assert case.likes == 1
        assert (await ledger.get_case(case_id)).likes == 1
        assert await ledger.get_total_likes() == 1
        assert received_events == [LikeSet(case_id=case_id, liker=VIEWER)]

    async def test_owner_can_like(self, ledger, received_events):
        case_id = await ledger.add_case(OWNER, "info", START_DATE, END_DATE)

        await ledger.set_like(OWNER, case_id)

        assert received_events == [LikeSet(case_id=1, liker=OWNER)]

    async def test_second_like_is_rejected(self, ledger, received_events):
        case_id = await ledger.add_case(OWNER, "info", START_DATE, END_DATE)
        await ledger.set_like(OWNER, case_id)
        await ledger.set_like(VIEWER, case_id)

        with pytest.raises(AlreadyLiked) as excinfo:
            await ledger.set_like(VIEWER, case_id)

        assert str(excinfo.value) == "you already set like on this case"
        assert (await ledger.get_case(case_id)).likes == 2
        assert await ledger.get_total_likes() == 2
        assert len(received_events) == 2

    async def test_same_identity_can_like_different_cases(self, ledger):
        first = await ledger.add_case(OWNER, "a", START_DATE, 0)
        second = await ledger.add_case(OWNER, "b", START_DATE, 0)

        await ledger.set_like(VIEWER, first)
        await ledger.set_like(VIEWER, second)

        assert await ledger.get_total_likes() == 2
        await assert_counters_consistent(ledger)

    async def test_like_unknown_case(self, ledger, received_events):
        await ledger.add_case(OWNER, "info", START_DATE, END_DATE)

        with pytest.raises(NotFound):
            await ledger.set_like(VIEWER, 2)

        assert received_events == []
        assert await ledger.get_total_likes() == 0


class TestScenarios:

    async def test_like_then_remove(self, ledger):
        assert await ledger.add_case(OWNER, "A", 100, 200) == 1
        assert await ledger.add_case(OWNER, "B", 150, 0) == 2

        await ledger.set_like(VIEWER, 1)
        assert (await ledger.get_case(1)).likes == 1
        assert await ledger.get_total_likes() == 1

        await ledger.remove_case(OWNER, 1)

        with pytest.raises(NotFound):
            await ledger.get_case(1)
        assert await ledger.get_total_likes() == 0
        cases = await ledger.get_cases()
        assert [(case.id, case.info, case.start_date, case.end_date) for case in cases] == [(2, "B", 150, 0)]
        assert await ledger.get_total_cases() == 1

    async def test_mixed_operations_keep_counters_consistent(self, ledger):
        viewers = [f"viewer-{i}" for i in range(4)]
        for i in range(5):
            await ledger.add_case(OWNER, f"case {i}", 100 + i, 0)
        for case_id in (1, 2, 3, 5):
            for viewer in viewers[:case_id % 4 + 1]:
                await ledger.set_like(viewer, case_id)
        await assert_counters_consistent(ledger)

        await ledger.update_case(OWNER, 2, "edited", 300, 400)
        await ledger.remove_case(OWNER, 3)
        await assert_counters_consistent(ledger)

        await ledger.set_like(OWNER, 4)
        await ledger.remove_case(OWNER, 1)
        await ledger.add_case(OWNER, "case 6", 600, 0)
        await assert_counters_consistent(ledger)

        assert [case.id for case in await ledger.get_cases()] == [2, 4, 5, 6]


class TestSerialization:

    async def test_concurrent_likes_are_serialized(self, ledger, session_factory, lock, events):
        case_id = await ledger.add_case(OWNER, "info", START_DATE, END_DATE)

        async def like_as(identity):
            async with session_factory() as session:
                service = LedgerService(session, lock=lock, events=events)
                await service.set_like(identity, case_id)

        await asyncio.gather(*(like_as(f"viewer-{i}") for i in range(10)))

        async with session_factory() as session:
            service = LedgerService(session, lock=lock, events=events)
            assert (await service.get_case(case_id)).likes == 10
            assert await service.get_total_likes() == 10

    async def test_concurrent_duplicate_likes(self, ledger, session_factory, lock, events, received_events):
        case_id = await ledger.add_case(OWNER, "info", START_DATE, END_DATE)

        async def like_as(identity):
            async with session_factory() as session:
                service = LedgerService(session, lock=lock, events=events)
                await service.set_like(identity, case_id)

        results = await asyncio.gather(*(like_as(VIEWER) for _ in range(3)), return_exceptions=True)

        assert sum(1 for result in results if isinstance(result, AlreadyLiked)) == 2
        assert received_events == [LikeSet(case_id=case_id, liker=VIEWER)]

        async with session_factory() as session:
            service = LedgerService(session, lock=lock, events=events)
            assert await service.get_total_likes() == 1
