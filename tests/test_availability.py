import random
from collections import namedtuple
from datetime import date
from meeting_rooms import db
from meeting_rooms.models import Reservation, STATUS_CANCELLED, STATUS_CONFIRMED
from meeting_rooms.scheduling.availability import evaluate_room, find_first_conflict, overlaps, sort_by_start
from meeting_rooms.services.availability_service import AvailabilityService

Slot = namedtuple('Slot', 'start_time end_time user_id')
DAY = date(2024, 6, 3)

def test_touching_intervals_do_not_overlap():
    assert not overlaps(540, 600, 600, 660)
    assert not overlaps(600, 660, 540, 600)

def test_partial_and_nested_overlap():
    assert overlaps(540, 600, 570, 630)
    assert overlaps(540, 720, 600, 630)
    assert overlaps(600, 630, 540, 720)

def test_free_room():
    result = evaluate_room(1, [Slot("09:00", "10:00", 1)], "10:00", "11:00")
    assert result.is_available
    assert result.next_available_time is None
    assert result.reserved_by_name is None

def test_no_reservations_means_available():
    assert evaluate_room(99, [], "09:00", "10:00").is_available

def test_conflict_reports_end_of_blocking_reservation():
    result = evaluate_room(1, [Slot("09:00", "10:00", 7)], "09:30", "10:30", {7: 'Ana'})
    assert not result.is_available
    assert result.next_available_time == "10:00"
    assert result.reserved_by_name == 'Ana'

def test_back_to_back_chain_is_skipped():
    slots = [Slot("10:00", "11:00", 1), Slot("09:00", "10:00", 1), Slot("11:00", "11:30", 1)]
    result = evaluate_room(1, slots, "09:15", "09:45")
    assert result.next_available_time == "11:30"

def test_overlapping_chain_is_skipped():
    slots = [Slot("09:00", "10:00", 1), Slot("09:30", "10:45", 1)]
    result = evaluate_room(1, slots, "09:00", "09:30")
    assert result.next_available_time == "10:45"

def test_gap_stops_the_chain():
    # 10:00-10:15 is free even though 10:15-11:00 is taken
    slots = [Slot("09:00", "10:00", 1), Slot("10:15", "11:00", 1)]
    result = evaluate_room(1, slots, "09:30", "10:30")
    assert result.next_available_time == "10:00"

def test_first_conflict_is_the_earliest_starting():
    slots = sort_by_start([Slot("11:00", "12:00", 2), Slot("09:00", "10:00", 1)])
    conflict = find_first_conflict(slots, "08:00", "13:00")
    assert conflict.start_time == "09:00"

def test_unknown_user_name_is_none():
    result = evaluate_room(1, [Slot("09:00", "10:00", 5)], "09:00", "10:00", {})
    assert result.reserved_by_name is None

def test_to_dict_uses_api_keys():
    result = evaluate_room(3, [Slot("09:00", "10:00", 1)], "09:00", "10:00")
    assert result.to_dict() == {
        'roomId': 3, 'isAvailable': False, 'nextAvailableTime': "10:00", 'reservedByName': None
    }


def _add(user, room, start, end, status=STATUS_CONFIRMED, day=DAY):
    reservation = Reservation(room_id=room.id, user_id=user.id, room_name=room.name,
                              room_location=room.location, date=day,
                              start_time=start, end_time=end, status=status)
    db.session.add(reservation)
    return reservation

def test_cancelled_reservations_are_ignored(app, init_data):
    user, _, room, _ = init_data
    _add(user, room, "09:00", "10:00", status=STATUS_CANCELLED)
    db.session.commit()
    assert AvailabilityService.check_room_availability(room.id, DAY, "09:00", "10:00").is_available

def test_other_days_are_ignored(app, init_data):
    user, _, room, _ = init_data
    _add(user, room, "09:00", "10:00", day=date(2024, 6, 4))
    db.session.commit()
    assert AvailabilityService.check_room_availability(room.id, DAY, "09:00", "10:00").is_available

def test_unknown_room_is_available(app, init_data):
    result = AvailabilityService.check_room_availability(4242, DAY, "09:00", "10:00")
    assert result.is_available
    assert result.room_id == 4242

def test_reserved_by_name_comes_from_user(app, init_data):
    user, _, room, _ = init_data
    _add(user, room, "09:00", "10:00")
    db.session.commit()
    result = AvailabilityService.check_room_availability(room.id, DAY, "9:30", "10:30")
    assert result.reserved_by_name == 'Ana Souza'
    assert result.next_available_time == "10:00"

def test_batched_matches_single_room(app, init_data):
    user, admin, room_small, room_large = init_data
    rng = random.Random(7)
    for room in (room_small, room_large):
        cursor = 8 * 60
        while cursor < 18 * 60:
            length = rng.choice([15, 30, 45, 60, 90])
            if rng.random() < 0.6:
                status = STATUS_CANCELLED if rng.random() < 0.2 else STATUS_CONFIRMED
                _add(rng.choice([user, admin]), room,
                     f"{cursor // 60:02d}:{cursor % 60:02d}",
                     f"{(cursor + length) // 60:02d}:{(cursor + length) % 60:02d}", status=status)
            cursor += length + rng.choice([0, 0, 15, 30])
    db.session.commit()

    for start in range(7 * 60, 19 * 60, 15):
        for length in (15, 60, 120):
            start_time = f"{start // 60:02d}:{start % 60:02d}"
            end = start + length
            end_time = f"{end // 60:02d}:{end % 60:02d}"
            batched = AvailabilityService.check_all_rooms_availability(DAY, start_time, end_time)
            singles = [AvailabilityService.check_room_availability(r.room_id, DAY, start_time, end_time)
                       for r in batched]
            assert batched == singles
    assert {r.room_id for r in batched} == {room_small.id, room_large.id}
