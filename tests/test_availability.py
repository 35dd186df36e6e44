"""
Tests for room availability checking.
"""

import pytest
from datetime import date

from models.reservation_availability import (
    EDIT_RESERVATION_EXCLUDED_STATUSES, NEW_RESERVATION_EXCLUDED_STATUSES,
    ConflictLookupError, find_conflicting_room_ids, get_available_rooms,
    query_conflicting_reservations, reservation_conflicts
)


ROOMS = [
    {'id': 1, 'room_number': '101', 'status': 'available'},
    {'id': 2, 'room_number': '102', 'status': 'available'},
    {'id': 3, 'room_number': '201', 'status': 'maintenance'},
    {'id': 4, 'room_number': '301', 'status': 'occupied'},
]


def make_source(records):
    """Conflict source that returns records as-is and remembers its calls."""
    calls = []

    def source(check_in, check_out, excluded_statuses, exclude_reservation_id):
        calls.append((check_in, check_out, excluded_statuses, exclude_reservation_id))
        return list(records)

    source.calls = calls
    return source


def reservation(res_id, room_id, check_in, check_out=None, status='confirmed'):
    return {
        'id': res_id,
        'room_id': room_id,
        'check_in_date': check_in,
        'check_out_date': check_out,
        'status': status,
    }


def room_ids(rooms):
    return [room['id'] for room in rooms]


class TestConflictPredicate:
    """Tests for the overlap rule between two stays."""

    def test_inclusive_overlap(self):
        """Stays sharing a boundary day conflict."""
        assert reservation_conflicts(
            date(2024, 2, 1), date(2024, 2, 5), date(2024, 2, 5), date(2024, 2, 8)
        )
        assert reservation_conflicts(
            date(2024, 2, 5), date(2024, 2, 8), date(2024, 2, 1), date(2024, 2, 5)
        )

    def test_disjoint_ranges(self):
        """Stays separated by at least one day do not conflict."""
        assert not reservation_conflicts(
            date(2024, 2, 1), date(2024, 2, 4), date(2024, 2, 5), date(2024, 2, 8)
        )

    def test_open_ended_existing_blocks_future(self):
        """An existing stay without check-out occupies the room indefinitely."""
        assert reservation_conflicts(
            date(2024, 1, 1), None, date(2030, 12, 1), date(2030, 12, 3)
        )

    def test_open_ended_target_same_day(self):
        """An open-ended target conflicts with a stay starting the same day."""
        assert reservation_conflicts(
            date(2024, 2, 3), date(2024, 2, 4), date(2024, 2, 3), None
        )

    def test_open_ended_target_running_stay(self):
        """An open-ended target conflicts with a stay that ends after it starts."""
        assert reservation_conflicts(
            date(2024, 2, 1), date(2024, 2, 5), date(2024, 2, 3), None
        )

    def test_open_ended_target_stay_ending_that_day(self):
        """A stay ending on the target day does not block an open-ended target."""
        assert not reservation_conflicts(
            date(2024, 2, 1), date(2024, 2, 3), date(2024, 2, 3), None
        )

    def test_open_ended_target_later_stay(self):
        """Stays starting after an open-ended target's first day are not counted."""
        assert not reservation_conflicts(
            date(2024, 2, 10), date(2024, 2, 12), date(2024, 2, 3), None
        )


class TestAvailableRooms:
    """Tests for filtering the room catalog."""

    def test_conflicting_room_removed(self):
        """Rooms in the conflict set are never returned."""
        source = make_source([reservation(10, 1, '2024-02-01', '2024-02-05')])
        rooms = get_available_rooms('2024-02-03', '2024-02-04', ROOMS, source)
        assert room_ids(rooms) == [2]

    @pytest.mark.parametrize('conflicting', [{1}, {2}, {1, 2}, {1, 2, 3, 4}])
    def test_never_returns_conflicting_room(self, conflicting):
        """No room id from the conflict set ever appears in the result."""
        records = [
            reservation(100 + room_id, room_id, '2024-03-01', '2024-03-10')
            for room_id in conflicting
        ]
        rooms = get_available_rooms('2024-03-02', '2024-03-05', ROOMS, make_source(records))
        assert not set(room_ids(rooms)) & conflicting

    def test_only_available_rooms(self):
        """Rooms under maintenance or occupied are left out."""
        rooms = get_available_rooms('2024-02-03', '2024-02-04', ROOMS, make_source([]))
        assert room_ids(rooms) == [1, 2]

    def test_self_exclusion(self):
        """The reservation being edited does not block its own room."""
        source = make_source([reservation(10, 1, '2024-02-01', '2024-02-05')])
        rooms = get_available_rooms(
            '2024-02-03', '2024-02-04', ROOMS, source,
            exclude_reservation_id=10,
            current_room_id=1,
            excluded_statuses=EDIT_RESERVATION_EXCLUDED_STATUSES
        )
        assert 1 in room_ids(rooms)
        assert source.calls[0][3] == 10

    def test_current_room_included_despite_status(self):
        """The edited reservation's room qualifies even if flagged occupied."""
        rooms = get_available_rooms(
            '2024-02-03', '2024-02-04', ROOMS, make_source([]), current_room_id=4
        )
        assert room_ids(rooms) == [1, 2, 4]

    def test_scenario_cancelled_overlap_ignored(self):
        """A confirmed overlap excludes the room even when a cancelled one also overlaps."""
        source = make_source([
            reservation(1, 1, '2024-02-01', '2024-02-05', 'confirmed'),
            reservation(2, 1, '2024-02-03', '2024-02-06', 'cancelled'),
        ])
        rooms = get_available_rooms('2024-02-03', '2024-02-04', ROOMS, source)
        assert 1 not in room_ids(rooms)

    def test_only_cancelled_overlap_frees_room(self):
        """A cancelled reservation never blocks a room."""
        source = make_source([reservation(2, 1, '2024-02-03', '2024-02-06', 'cancelled')])
        rooms = get_available_rooms('2024-02-03', '2024-02-04', ROOMS, source)
        assert room_ids(rooms) == [1, 2]

    def test_missing_check_in_returns_empty(self):
        """Without a check-in date nothing is queried and nothing is returned."""
        source = make_source([])
        assert get_available_rooms(None, '2024-02-04', ROOMS, source) == []
        assert get_available_rooms('', None, ROOMS, source) == []
        assert get_available_rooms('garbage', None, ROOMS, source) == []
        assert source.calls == []

    def test_open_ended_request(self):
        """Open-ended requests are blocked by any running open-ended stay."""
        source = make_source([reservation(5, 2, '2024-01-01', None)])
        rooms = get_available_rooms('2024-06-01', None, ROOMS, source)
        assert room_ids(rooms) == [1]

    def test_row_objects_accepted(self):
        """Records exposing attributes are read like dicts."""
        class Record:
            id = 7
            room_id = 2
            check_in_date = date(2024, 2, 1)
            check_out_date = date(2024, 2, 10)
            status = 'checked_in'

        rooms = get_available_rooms('2024-02-03', '2024-02-04', ROOMS, make_source([Record()]))
        assert room_ids(rooms) == [1]


class TestStatusPolicies:
    """Tests for the status exclusion policies of create and edit flows."""

    def test_new_policy_ignores_checked_out(self):
        """Checked-out stays free the room for new reservations."""
        source = make_source([reservation(3, 1, '2024-02-01', '2024-02-05', 'checked_out')])
        rooms = get_available_rooms('2024-02-03', '2024-02-04', ROOMS, source)
        assert 1 in room_ids(rooms)

    def test_edit_policy_counts_checked_out(self):
        """Checked-out stays still block the room when editing."""
        source = make_source([reservation(3, 1, '2024-02-01', '2024-02-05', 'checked_out')])
        rooms = get_available_rooms(
            '2024-02-03', '2024-02-04', ROOMS, source,
            exclude_reservation_id=99,
            excluded_statuses=EDIT_RESERVATION_EXCLUDED_STATUSES
        )
        assert 1 not in room_ids(rooms)

    def test_policies_differ(self):
        """The edit flow excludes fewer statuses than the create flow."""
        assert set(EDIT_RESERVATION_EXCLUDED_STATUSES) < set(NEW_RESERVATION_EXCLUDED_STATUSES)

    def test_over_fetching_source_is_filtered(self):
        """Statuses and self-exclusion are re-applied to source results."""
        source = make_source([
            reservation(1, 1, '2024-02-01', '2024-02-05', 'cancelled'),
            reservation(2, 2, '2024-02-01', '2024-02-05', 'confirmed'),
        ])
        conflicting = find_conflicting_room_ids(
            '2024-02-03', '2024-02-04', source, exclude_reservation_id=2
        )
        assert conflicting == set()

    def test_source_receives_policy(self):
        """The source is called with parsed dates and the excluded statuses."""
        source = make_source([])
        find_conflicting_room_ids('2024-02-03', None, source)
        check_in, check_out, statuses, exclude_id = source.calls[0]
        assert check_in == date(2024, 2, 3)
        assert check_out is None
        assert statuses == NEW_RESERVATION_EXCLUDED_STATUSES
        assert exclude_id is None


class TestLookupFailure:
    """Lookup failures are surfaced, never read as free rooms."""

    def test_source_error_propagates(self):
        """A failing source raises ConflictLookupError with the cause attached."""
        def broken_source(*args):
            raise ConnectionError('database unreachable')

        with pytest.raises(ConflictLookupError) as exc_info:
            get_available_rooms('2024-02-03', '2024-02-04', ROOMS, broken_source)
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    def test_unreadable_record_raises(self):
        """Records with unparseable dates are treated as a failed lookup."""
        source = make_source([reservation(1, 1, 'not-a-date', '2024-02-05')])
        with pytest.raises(ConflictLookupError):
            get_available_rooms('2024-02-03', '2024-02-04', ROOMS, source)


class TestSQLiteConflictSource:
    """Tests for the database-backed conflict source."""

    def _insert(self, room_id, check_in, check_out, status='confirmed', code=None):
        from database import get_db
        db = get_db()
        cursor = db.cursor()
        cursor.execute('''
            INSERT INTO reservations (reservation_code, room_id, guest_name,
                                      check_in_date, check_out_date, status, total_amount)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        ''', (code or f'T{room_id}{check_in}{status}', room_id, 'Teste',
              check_in, check_out, status, 0))
        db.commit()
        return cursor.lastrowid

    def test_scenario_confirmed_and_cancelled(self, app, rooms):
        """Room with a confirmed overlap is excluded; cancelled overlap is ignored."""
        room_x = rooms['101']['id']
        self._insert(room_x, '2024-02-01', '2024-02-05', 'confirmed')
        self._insert(room_x, '2024-02-03', '2024-02-06', 'cancelled')

        from models.room import get_all_rooms
        available = get_available_rooms(
            '2024-02-03', '2024-02-04', get_all_rooms(), query_conflicting_reservations
        )
        numbers = [room['room_number'] for room in available]
        assert '101' not in numbers
        assert '102' in numbers

    def test_query_excludes_statuses(self, app, rooms):
        """Excluded statuses are filtered in SQL."""
        room_id = rooms['102']['id']
        self._insert(room_id, '2024-02-01', '2024-02-05', 'checked_out')

        new_policy = query_conflicting_reservations('2024-02-02', '2024-02-03')
        edit_policy = query_conflicting_reservations(
            '2024-02-02', '2024-02-03', EDIT_RESERVATION_EXCLUDED_STATUSES
        )
        assert new_policy == []
        assert [r['room_id'] for r in edit_policy] == [room_id]

    def test_query_open_ended(self, app, rooms):
        """Open-ended stored stays are returned for any later range."""
        room_id = rooms['201']['id']
        self._insert(room_id, '2024-01-01', None)

        records = query_conflicting_reservations('2025-01-01', None)
        assert [r['room_id'] for r in records] == [room_id]

    def test_query_excludes_reservation_id(self, app, rooms):
        """The edited reservation is left out of the results."""
        res_id = self._insert(rooms['301']['id'], '2024-02-01', '2024-02-05')
        assert query_conflicting_reservations(
            '2024-02-01', '2024-02-05', exclude_reservation_id=res_id
        ) == []
