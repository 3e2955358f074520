"""Tests for the doorway auction coordinator."""

from conftest import CLOSED_ROOM, FakeController, ascii_map

from roomsweep.bidding import BiddingCoordinator
from roomsweep.doorways import Doorway, DoorwayRegistry
from roomsweep.geometry import CardinalDirection
from roomsweep.messages import BiddingMessage, DoorwayFoundMessage


def top_doorway():
    return Doorway.from_corners((3, 6), (5, 6), CardinalDirection.NORTH)


def make_coordinator(robot_id=0, team_size=2, timeout=30, tile=(1, 1)):
    controller = FakeController(ascii_map(*CLOSED_ROOM), robot_id=robot_id, tile=tile)
    registry = DoorwayRegistry()
    coordinator = BiddingCoordinator(controller, registry, team_size=team_size,
                                     timeout_ticks=timeout)
    return coordinator, controller, registry


class TestRequester:
    """Opening, collecting and resolving auctions."""

    def test_open_auction_bids_and_announces(self):
        coordinator, controller, registry = make_coordinator()
        doorway, _ = registry.register(top_doorway())
        auction = coordinator.open_auction(doorway, tick=10)
        assert auction.bids == {0: 6}
        assert coordinator.has_open_auctions()
        assert len(controller.sent) == 1
        announcement = controller.sent[0]
        assert isinstance(announcement, DoorwayFoundMessage)
        assert announcement.requester_id == 0

    def test_all_bids_in_resolves_to_shortest_path(self):
        coordinator, controller, registry = make_coordinator()
        doorway, _ = registry.register(top_doorway())
        coordinator.open_auction(doorway, tick=10)
        controller.inbox = [BiddingMessage(0, {1: 3}, top_doorway())]
        coordinator.handle_messages()
        assert coordinator.auctions[0].bids == {0: 6, 1: 3}

        won = coordinator.resolve_ready(tick=11)
        assert won == []
        assert not coordinator.has_open_auctions()
        award = controller.sent[-1]
        assert award.final and award.bids == {0: 6, 1: 3}
        assert coordinator.awards_sent == 1
        # Robot 1 goes there, so it is no longer ours to explore
        assert doorway.explored

    def test_bids_for_other_requesters_are_ignored(self):
        coordinator, controller, registry = make_coordinator()
        doorway, _ = registry.register(top_doorway())
        coordinator.open_auction(doorway, tick=0)
        controller.inbox = [BiddingMessage(5, {1: 3}, top_doorway())]
        coordinator.handle_messages()
        assert coordinator.auctions[0].bids == {0: 6}

    def test_waits_for_missing_bids_until_timeout(self):
        coordinator, controller, registry = make_coordinator(team_size=3, timeout=30)
        doorway, _ = registry.register(top_doorway())
        coordinator.open_auction(doorway, tick=0)

        assert coordinator.resolve_ready(tick=29) == []
        assert coordinator.has_open_auctions()

        won = coordinator.resolve_ready(tick=30)
        assert won == [doorway]
        assert coordinator.has_claim()
        assert coordinator.next_claim() is doorway
        assert controller.sent[-1].final
        assert not doorway.explored

    def test_no_bids_at_timeout_drops_auction(self):
        coordinator, controller, registry = make_coordinator(timeout=5)
        unreachable, _ = registry.register(
            Doorway.from_corners((3, 9), (5, 9), CardinalDirection.NORTH))
        auction = coordinator.open_auction(unreachable, tick=0)
        assert auction.bids == {}

        assert coordinator.resolve_ready(tick=5) == []
        assert not coordinator.has_open_auctions()
        assert len(controller.sent) == 1  # the announcement only, no award
        assert coordinator.awards_sent == 0
        assert not unreachable.explored
        assert not coordinator.has_claim()


class TestReceiver:
    """Responding to announcements and applying awards."""

    def test_announcement_gets_one_bid_even_when_duplicated(self):
        coordinator, controller, registry = make_coordinator(robot_id=1)
        announcement = DoorwayFoundMessage(top_doorway(), 0)
        controller.inbox = [announcement, DoorwayFoundMessage(top_doorway(), 0)]
        coordinator.handle_messages()
        assert len(controller.sent) == 1
        assert controller.sent[0].bids == {1: 6}
        assert controller.sent[0].requester_id == 0
        assert len(registry) == 1

    def test_own_announcement_is_ignored(self):
        coordinator, controller, _ = make_coordinator(robot_id=0)
        controller.inbox = [DoorwayFoundMessage(top_doorway(), 0)]
        coordinator.handle_messages()
        assert controller.sent == []

    def test_award_to_someone_else_marks_explored(self):
        coordinator, controller, registry = make_coordinator(robot_id=1)
        controller.inbox = [BiddingMessage(0, {0: 6, 1: 9}, top_doorway(), final=True)]
        won = coordinator.handle_messages()
        assert won == []
        assert len(registry) == 1
        assert all(d.explored for d in registry)

    def test_award_to_us_claims(self):
        coordinator, controller, registry = make_coordinator(robot_id=1)
        controller.inbox = [BiddingMessage(0, {0: 6, 1: 3}, top_doorway(), final=True)]
        won = coordinator.handle_messages()
        assert len(won) == 1
        assert coordinator.next_claim() is won[0]
        assert not won[0].explored

    def test_duplicated_award_claims_once(self):
        coordinator, controller, _ = make_coordinator(robot_id=1)
        award = BiddingMessage(0, {0: 6, 1: 3}, top_doorway(), final=True)
        controller.inbox = [award, BiddingMessage(0, {0: 6, 1: 3}, top_doorway(), final=True)]
        assert len(coordinator.handle_messages()) == 1
        controller.inbox = [BiddingMessage(0, {0: 6, 1: 3}, top_doorway(), final=True)]
        assert coordinator.handle_messages() == []
        assert coordinator.auctions_won == 1

    def test_award_closes_our_auction_for_the_same_opening(self):
        coordinator, controller, registry = make_coordinator(robot_id=1)
        doorway, _ = registry.register(top_doorway())
        coordinator.open_auction(doorway, tick=0)
        controller.inbox = [BiddingMessage(0, {0: 2, 1: 6}, top_doorway(), final=True)]
        coordinator.handle_messages()
        assert not coordinator.has_open_auctions()
        assert doorway.explored

    def test_partial_bids_merge_in_any_order(self):
        first, first_ctl, first_reg = make_coordinator(robot_id=0, team_size=4)
        second, second_ctl, second_reg = make_coordinator(robot_id=0, team_size=4)
        messages = [BiddingMessage(0, {1: 4}, top_doorway()),
                    BiddingMessage(0, {2: 8}, top_doorway()),
                    BiddingMessage(0, {3: 2}, top_doorway())]
        for coordinator, controller, registry, inbox in (
                (first, first_ctl, first_reg, messages),
                (second, second_ctl, second_reg, list(reversed(messages)))):
            doorway, _ = registry.register(top_doorway())
            coordinator.open_auction(doorway, tick=0)
            controller.inbox = inbox
            coordinator.handle_messages()
        assert first.auctions[0].bids == second.auctions[0].bids == {0: 6, 1: 4, 2: 8, 3: 2}
