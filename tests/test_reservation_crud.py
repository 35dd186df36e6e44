"""
Tests for reservation CRUD, status changes and hotel settings.
Runs against the seeded test database (rooms 101, 102 at 150.00; 201 at 250.00; 301 at 400.00).
"""

import pytest
from datetime import date, time
from decimal import Decimal

from models.hotel_settings import get_hotel_settings, update_hotel_settings
from models.reservation_crud import (
    RoomUnavailableError, change_reservation_status, create_reservation,
    get_reservation_by_id, get_reservations, get_status_history,
    recalculate_reservation_total, set_check_out_date, update_reservation
)
from models.reservation_status import ReservationStatus, Severity
from models.room import get_room_by_id, set_room_status
from models.system_log import get_system_logs


TODAY = date(2024, 1, 10)


class TestCreateReservation:
    """Tests for reservation creation."""

    def test_total_from_room_rate(self, app, rooms):
        """Three nights in a 150.00 room cost 450.00."""
        reservation_id, code = create_reservation(
            rooms['101']['id'], '2024-01-10', '2024-01-13', guest_name='Maria Souza'
        )
        reservation = get_reservation_by_id(reservation_id)

        assert len(code) == 8
        assert reservation['reservation_code'] == code
        assert reservation['total_amount'] == 450.0
        assert reservation['status'] == 'confirmed'
        assert reservation['check_in_date'] == date(2024, 1, 10)
        assert reservation['room_number'] == '101'

    def test_open_ended_costs_one_night(self, app, rooms):
        """Open-ended stays start with one night charged."""
        reservation_id, _ = create_reservation(rooms['201']['id'], '2024-01-10')
        reservation = get_reservation_by_id(reservation_id)
        assert reservation['check_out_date'] is None
        assert reservation['total_amount'] == 250.0

    def test_history_and_audit(self, app, rooms):
        """Creation is recorded in history and the audit log."""
        reservation_id, _ = create_reservation(rooms['101']['id'], '2024-01-10', '2024-01-12', created_by='recepcao')

        history = get_status_history(reservation_id)
        assert len(history) == 1
        assert history[0]['action'] == 'created'
        assert history[0]['changed_by'] == 'recepcao'

        logs = get_system_logs(entity_type='reservation', entity_id=reservation_id)
        assert logs[0]['tags'] == ['create', 'success']
        assert logs[0]['details']['nights'] == 2

    def test_overlap_rejected(self, app, rooms):
        """A second stay on an occupied range raises RoomUnavailableError."""
        room_id = rooms['101']['id']
        create_reservation(room_id, '2024-01-10', '2024-01-13')

        with pytest.raises(RoomUnavailableError):
            create_reservation(room_id, '2024-01-12', '2024-01-15')

    def test_open_ended_blocks_later_dates(self, app, rooms):
        """An open-ended stay blocks the room indefinitely."""
        room_id = rooms['102']['id']
        create_reservation(room_id, '2024-01-10')

        with pytest.raises(RoomUnavailableError):
            create_reservation(room_id, '2024-06-01', '2024-06-03')

    def test_other_room_still_free(self, app, rooms):
        """Conflicts are per room."""
        create_reservation(rooms['101']['id'], '2024-01-10', '2024-01-13')
        reservation_id, _ = create_reservation(rooms['102']['id'], '2024-01-10', '2024-01-13')
        assert reservation_id

    @pytest.mark.parametrize('check_in,check_out', [
        ('2024-01-13', '2024-01-10'),
        ('2024-01-10', '2024-01-10'),
    ])
    def test_invalid_range(self, app, rooms, check_in, check_out):
        """Check-out must be strictly after check-in."""
        with pytest.raises(ValueError, match='posterior'):
            create_reservation(rooms['101']['id'], check_in, check_out)

    def test_missing_check_in(self, app, rooms):
        """Check-in is required."""
        with pytest.raises(ValueError, match='check-in'):
            create_reservation(rooms['101']['id'], None)

    def test_unknown_room(self, app):
        """Unknown rooms are rejected."""
        with pytest.raises(ValueError, match='Quarto'):
            create_reservation(9999, '2024-01-10')

    def test_room_under_maintenance(self, app, rooms):
        """Rooms not flagged available cannot be booked."""
        from database import get_db
        set_room_status(rooms['301']['id'], 'maintenance')
        get_db().commit()

        with pytest.raises(RoomUnavailableError):
            create_reservation(rooms['301']['id'], '2024-01-10', '2024-01-11')


class TestStatusChange:
    """Tests for status changes through the validators."""

    def _create(self, rooms, number='101', check_in='2024-01-10', check_out='2024-01-13'):
        reservation_id, _ = create_reservation(rooms[number]['id'], check_in, check_out)
        return reservation_id

    def test_check_in_marks_room_occupied(self, app, rooms):
        """Check-in updates status, room flag and history."""
        reservation_id = self._create(rooms)

        result = change_reservation_status(reservation_id, 'checked_in', changed_by='recepcao', today=TODAY)

        assert result.valid
        reservation = get_reservation_by_id(reservation_id)
        assert reservation['status'] == 'checked_in'
        assert get_room_by_id(rooms['101']['id'])['status'] == 'occupied'
        assert [h['status_type'] for h in get_status_history(reservation_id)] == ['confirmed', 'checked_in']

    def test_check_out_frees_room(self, app, rooms):
        """Check-out sets the room back to available."""
        reservation_id = self._create(rooms)
        change_reservation_status(reservation_id, ReservationStatus.CHECKED_IN, today=TODAY)

        result = change_reservation_status(reservation_id, 'checked_out', today=date(2024, 1, 13))

        assert result.valid
        assert get_reservation_by_id(reservation_id)['status'] == 'checked_out'
        assert get_room_by_id(rooms['101']['id'])['status'] == 'available'

    def test_invalid_transition_not_written(self, app, rooms):
        """Rejected transitions leave the reservation untouched."""
        reservation_id = self._create(rooms)

        result = change_reservation_status(reservation_id, 'checked_out', today=TODAY)

        assert not result.valid
        assert ReservationStatus.CONFIRMED.label in result.message
        assert get_reservation_by_id(reservation_id)['status'] == 'confirmed'
        assert len(get_status_history(reservation_id)) == 1

        failures = get_system_logs(entity_type='reservation', entity_id=reservation_id, level='error')
        assert failures[0]['tags'] == ['status_change', 'failure']

    def test_forced_transition(self, app, rooms):
        """enforce=False writes an invalid transition anyway."""
        reservation_id = self._create(rooms)

        result = change_reservation_status(reservation_id, 'checked_out', enforce=False, today=TODAY)

        assert not result.valid
        assert get_reservation_by_id(reservation_id)['status'] == 'checked_out'

    def test_terminal_status_is_final(self, app, rooms):
        """Cancelled reservations cannot be reopened."""
        reservation_id = self._create(rooms)
        change_reservation_status(reservation_id, 'cancelled', today=TODAY)

        result = change_reservation_status(reservation_id, 'confirmed', today=TODAY)
        assert not result.valid

    def test_cancelled_stay_frees_dates(self, app, rooms):
        """New reservations ignore cancelled stays."""
        reservation_id = self._create(rooms)
        change_reservation_status(reservation_id, 'cancelled', today=TODAY)

        new_id, _ = create_reservation(rooms['101']['id'], '2024-01-11', '2024-01-12')
        assert new_id != reservation_id

    def test_warning_result(self, app, rooms):
        """Valid changes may carry a warning."""
        reservation_id = self._create(rooms)
        change_reservation_status(reservation_id, 'checked_in', today=TODAY)

        result = change_reservation_status(reservation_id, 'cancelled', today=TODAY)
        assert result.valid
        assert result.severity is Severity.WARNING

    def test_unknown_reservation(self, app):
        """Unknown reservations raise ValueError."""
        with pytest.raises(ValueError):
            change_reservation_status(9999, 'checked_in')

    def test_unknown_status(self, app, rooms):
        """Unknown target statuses raise ValueError."""
        reservation_id = self._create(rooms)
        with pytest.raises(ValueError):
            change_reservation_status(reservation_id, 'archived', today=TODAY)

    def test_filter_by_status(self, app, rooms):
        """Reservations can be listed by status."""
        first = self._create(rooms, '101')
        self._create(rooms, '102')
        change_reservation_status(first, 'cancelled', today=TODAY)

        assert [r['id'] for r in get_reservations(status='cancelled')] == [first]
        assert len(get_reservations()) == 2


class TestEditing:
    """Tests for reservation edits and check-out dates."""

    def test_set_check_out_recalculates(self, app, rooms):
        """Closing an open-ended stay recomputes the total."""
        reservation_id, _ = create_reservation(rooms['101']['id'], '2024-01-10')

        reservation = set_check_out_date(reservation_id, '2024-01-14')

        assert reservation['check_out_date'] == date(2024, 1, 14)
        assert reservation['total_amount'] == 600.0

    def test_set_check_out_before_check_in(self, app, rooms):
        """The new check-out must be after check-in."""
        reservation_id, _ = create_reservation(rooms['101']['id'], '2024-01-10')
        with pytest.raises(ValueError):
            set_check_out_date(reservation_id, '2024-01-09')

    def test_set_check_out_required(self, app, rooms):
        """A check-out date must be given."""
        reservation_id, _ = create_reservation(rooms['101']['id'], '2024-01-10')
        with pytest.raises(ValueError, match='check-out'):
            set_check_out_date(reservation_id, '')

    def test_set_check_out_collision(self, app, rooms):
        """Extending into another stay is rejected."""
        room_id = rooms['101']['id']
        first, _ = create_reservation(room_id, '2024-01-10', '2024-01-12')
        create_reservation(room_id, '2024-01-15', '2024-01-17')

        with pytest.raises(RoomUnavailableError):
            set_check_out_date(first, '2024-01-16')

    def test_set_check_out_on_terminal(self, app, rooms):
        """Terminal reservations cannot be edited."""
        reservation_id, _ = create_reservation(rooms['101']['id'], '2024-01-10')
        change_reservation_status(reservation_id, 'cancelled', today=TODAY)

        with pytest.raises(ValueError, match='não pode ser modificada'):
            set_check_out_date(reservation_id, '2024-01-12')

    def test_set_check_out_unpriceable_writes_nothing(self, app, rooms):
        """When the total cannot be computed the check-out date is not stored either."""
        from database import get_db

        reservation_id, _ = create_reservation(rooms['101']['id'], '2024-01-10')
        db = get_db()
        db.execute("UPDATE hotel_settings SET check_in_time = 'xx' WHERE id = 1")
        db.commit()

        with pytest.raises(ValueError):
            set_check_out_date(reservation_id, '2024-01-13')

        reservation = get_reservation_by_id(reservation_id)
        assert reservation['check_out_date'] is None
        assert reservation['total_amount'] == 150.0

    def test_update_keeps_total_by_default(self, app, rooms):
        """Editing dates keeps the stored total unless asked to recalculate."""
        reservation_id, _ = create_reservation(rooms['101']['id'], '2024-01-10', '2024-01-12')

        reservation = update_reservation(reservation_id, check_out_date='2024-01-15')
        assert reservation['total_amount'] == 300.0

        reservation = update_reservation(reservation_id, recalculate=True)
        assert reservation['total_amount'] == 750.0

    def test_update_room_change(self, app, rooms):
        """Moving to another room uses that room's rate."""
        reservation_id, _ = create_reservation(rooms['101']['id'], '2024-01-10', '2024-01-12')

        reservation = update_reservation(reservation_id, room_id=rooms['301']['id'], recalculate=True)
        assert reservation['room_number'] == '301'
        assert reservation['total_amount'] == 800.0

    def test_update_to_open_ended(self, app, rooms):
        """Passing None makes the stay open-ended."""
        reservation_id, _ = create_reservation(rooms['101']['id'], '2024-01-10', '2024-01-12')

        reservation = update_reservation(reservation_id, check_out_date=None, recalculate=True)
        assert reservation['check_out_date'] is None
        assert reservation['total_amount'] == 150.0

    def test_update_collision(self, app, rooms):
        """Moving onto a booked room is rejected."""
        first, _ = create_reservation(rooms['101']['id'], '2024-01-10', '2024-01-12')
        create_reservation(rooms['102']['id'], '2024-01-10', '2024-01-12')

        with pytest.raises(RoomUnavailableError):
            update_reservation(first, room_id=rooms['102']['id'])

    def test_edit_policy_counts_checked_out(self, app, rooms):
        """Edits still collide with checked-out stays on the same room."""
        room_id = rooms['101']['id']
        past, _ = create_reservation(room_id, '2024-01-10', '2024-01-12')
        change_reservation_status(past, 'checked_in', today=TODAY)
        change_reservation_status(past, 'checked_out', today=date(2024, 1, 12))

        # Overlaps the checked-out stay, allowed for a new reservation
        other, _ = create_reservation(room_id, '2024-01-11', '2024-01-12')

        with pytest.raises(RoomUnavailableError):
            update_reservation(other, check_out_date='2024-01-13')

    def test_recalculate_total(self, app, rooms):
        """Totals follow changed hotel times."""
        reservation_id, _ = create_reservation(rooms['101']['id'], '2024-01-10', '2024-01-13')
        update_hotel_settings(check_in_time='12:00', check_out_time='14:00')

        assert recalculate_reservation_total(reservation_id) == Decimal('600.00')


class TestHotelSettings:
    """Tests for stored hotel settings."""

    def test_seeded_defaults(self, app):
        """The seeded row uses the configured defaults."""
        settings = get_hotel_settings()
        assert settings.check_in_time == time(14, 0)
        assert settings.check_out_time == time(12, 0)
        assert settings.currency == 'BRL'

    def test_update(self, app):
        """Updates are stored and returned."""
        settings = update_hotel_settings(check_in_time='15:00', name='Hotel Mar Azul')
        assert settings.check_in_time == time(15, 0)
        assert settings.check_out_time == time(12, 0)
        assert get_hotel_settings().name == 'Hotel Mar Azul'

    def test_invalid_time(self, app):
        """Invalid times are rejected before writing."""
        with pytest.raises(ValueError):
            update_hotel_settings(check_in_time='31:00')
        assert get_hotel_settings().check_in_time == time(14, 0)

    def test_missing_row_uses_config(self, app):
        """Without the settings row, configuration defaults apply."""
        from database import get_db
        db = get_db()
        db.execute('DELETE FROM hotel_settings')
        db.commit()

        assert get_hotel_settings().check_in_time == time(14, 0)


class TestSeedDemoRooms:
    """Tests for the demo room seeder."""

    def test_creates_rooms(self, app):
        """Demo rooms are numbered from 900 up."""
        from database import seed_demo_rooms
        from models.room import get_all_rooms

        assert seed_demo_rooms(3, '99.90') == 3
        numbers = [room['room_number'] for room in get_all_rooms()]
        assert {'900', '901', '902'} <= set(numbers)

    @pytest.mark.parametrize('count,price', [(0, '10'), (2, 'abc'), (2, '-1')])
    def test_invalid_input(self, app, count, price):
        """Bad counts and prices are rejected."""
        from database import seed_demo_rooms

        with pytest.raises(ValueError):
            seed_demo_rooms(count, price)
