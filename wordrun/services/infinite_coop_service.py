"""
Infinite Coop Service

Two players share one run and alternate attempts. Whose turn it is is
always recomputed from the room (see ``room_service.current_turn_player``);
``RunState.current_turn_player_id`` only caches that value for clients.
"""

import logging
from typing import Optional, Tuple

from bson.objectid import ObjectId

from ..models.events import (
    GameOver, GameStarted, GuessMade, PlayerAbandoned, RematchRequested,
    RematchResponded, TurnChanged, WordCompleted,
)
from ..models.room import Room, RoomStatus
from ..models.run import RunState, RunStatus
from .errors import ConflictError, ForbiddenError, NotFoundError, StateCorruptionError
from .room_service import current_turn_player, is_player_turn, next_player
from .run_engine import (
    OUTCOME_ABANDONED, OUTCOME_COMPLETED, OUTCOME_CONTINUE, OUTCOME_FAILED,
    OUTCOME_UNCHANGED, OUTCOME_WORD_WON, RunEngine, RunResult,
)

logger = logging.getLogger(__name__)


class InfiniteCoopService(RunEngine):

    def __init__(self, run_store, users_service, dictionary, word_pool, max_attempts: int,
                 locks, room_service, notifier, rng=None):
        super().__init__(run_store, users_service, dictionary, word_pool, max_attempts, locks, rng)
        self.room_service = room_service
        self.room_store = room_service.room_store
        self.notifier = notifier

    def expected_turn_player(self, room: Room, run: RunState) -> Optional[str]:
        """Fresh turn derivation for the next attempt of an active run."""
        if not run.is_active:
            return None
        return current_turn_player(room, run.attempts_used + 1)

    def get_coop_run(self, room_id: str) -> Optional[RunState]:
        return self.run_store.find_active_for_room(room_id)

    def join_room(self, user_id: str, room_id: str) -> Tuple[Room, Optional[RunState]]:
        """Join a room and start the shared run as soon as it is full."""
        room = self.room_service.require_room(room_id)
        with self.locks.hold(self.room_service.lock_key(room.room_id)):
            room = self.room_service.join_room(user_id, room.room_id)
            run = None
            if room.status is RoomStatus.PLAYING:
                run = self.start_coop_run(room)
            return room, run

    def start_coop_run(self, room: Room) -> RunState:
        """
        Create the shared run of a full, playing room.

        Player 1 nominally owns the run; both players guess on it.
        """
        if len(room.players) != 2:
            raise ConflictError("Room needs 2 players")
        if room.status is not RoomStatus.PLAYING:
            raise ConflictError("Room is not playing")

        existing = self.get_coop_run(room.room_id)
        if existing:
            return existing

        first_word = self.pick_next_word(set())
        if not first_word:
            raise StateCorruptionError("No words available to start the infinite mode")

        opener = current_turn_player(room, 1)
        run = RunState(
            run_id=str(ObjectId()),
            user_id=room.players[0].user_id,
            max_attempts=self.max_attempts,
            target_word=first_word,
            used_words=[first_word],
            room_id=room.room_id,
            is_multiplayer=True,
            current_turn_player_id=opener,
        )
        self.run_store.insert(run)

        room.current_run_id = run.run_id
        try:
            self.room_store.save(room)
        except ConflictError:
            run.status = RunStatus.FAILED
            run.current_turn_player_id = None
            self.run_store.save(run)
            raise

        for player in room.players:
            self.users_service.update_progress(player.user_id, RunStatus.ACTIVE.value, 0)

        logger.info(f"Coop run {run.run_id} started in room {room.room_id}, {opener} opens")
        self.notifier.notify(room.room_id, GameStarted(
            run_id=run.run_id,
            max_attempts=run.max_attempts,
            word_length=len(first_word),
            current_turn_player_id=opener,
        ))
        return run

    def submit_coop_guess(self, room_id: str, user_id: str, guess_word: str) -> RunResult:
        room = self.room_service.require_room(room_id)
        with self.locks.hold(self.room_service.lock_key(room.room_id)):
            room = self.room_service.require_room(room.room_id)
            self.room_service.require_member(room, user_id)
            if room.status is not RoomStatus.PLAYING:
                raise ConflictError("Room is not playing")

            run = self.get_coop_run(room.room_id)
            if run is None:
                raise NotFoundError("No active run for this room")

            next_attempt = run.attempts_used + 1
            if not is_player_turn(room, next_attempt, user_id):
                expected = current_turn_player(room, next_attempt)
                raise ForbiddenError(f"Not your turn! Wait for {room.username_of(expected)} to play.")

            normalized = self.validate_guess(run, guess_word)
            guess, evaluation = self.apply_guess(run, normalized, player_id=user_id)
            guess_event = GuessMade(
                player_id=user_id,
                player_name=room.username_of(user_id),
                guess_word=guess.guess_word,
                pattern=guess.pattern,
                attempt_number=guess.attempt_number,
            )

            if evaluation.is_correct:
                return self._handle_victory(room, run, guess, evaluation, guess_event)

            if self.is_out_of_attempts(run):
                final_score = run.current_score
                entry = self.fail_run(run)
                room.status = RoomStatus.FINISHED
                self._commit(run, room)
                users = self._update_both(room, RunStatus.FAILED.value, 0, final_score)
                logger.info(f"Coop run {run.run_id} failed on '{entry.word}' with score {final_score}")

                self.notifier.notify(room.room_id, guess_event)
                self.notifier.notify(room.room_id, GameOver(
                    final_score=final_score,
                    words_completed=run.words_completed,
                    reason=OUTCOME_FAILED,
                    last_word=entry.word,
                ))
                return RunResult(
                    run=run, outcome=OUTCOME_FAILED, total_words=self.total_words(), room=room,
                    guess=guess, evaluation=evaluation, finished_word=entry,
                    final_score=final_score, users=users,
                )

            upcoming = next_player(room, run.attempts_used)
            run.current_turn_player_id = upcoming
            self.run_store.save(run)

            self.notifier.notify(room.room_id, guess_event)
            self.notifier.notify(room.room_id, TurnChanged(
                current_turn_player_id=upcoming,
                current_turn_player_name=room.username_of(upcoming),
            ))
            return RunResult(
                run=run, outcome=OUTCOME_CONTINUE, total_words=self.total_words(), room=room,
                guess=guess, evaluation=evaluation, next_turn_player_id=upcoming,
            )

    def _handle_victory(self, room, run, guess, evaluation, guess_event) -> RunResult:
        attained = run.current_score + 1
        entry = self.win_word(run)
        room.games_played += 1

        if run.status is RunStatus.COMPLETED:
            run.current_turn_player_id = None
            room.status = RoomStatus.FINISHED
            self._commit(run, room)
            users = self._update_both(room, RunStatus.COMPLETED.value, 0, attained)
            logger.info(f"Coop run {run.run_id} completed the word pool with score {attained}")

            self.notifier.notify(room.room_id, guess_event)
            self.notifier.notify(room.room_id, WordCompleted(
                word=entry.word, current_score=attained, next_word_length=None,
            ))
            self.notifier.notify(room.room_id, GameOver(
                final_score=attained,
                words_completed=run.words_completed,
                reason=OUTCOME_COMPLETED,
                last_word=entry.word,
            ))
            return RunResult(
                run=run, outcome=OUTCOME_COMPLETED, total_words=self.total_words(), room=room,
                guess=guess, evaluation=evaluation, finished_word=entry,
                final_score=attained, users=users,
            )

        # Whoever did not open the finished word opens the next one
        opener = current_turn_player(room, 1)
        run.current_turn_player_id = opener
        self._commit(run, room)
        users = self._update_both(room, RunStatus.ACTIVE.value, run.current_score, run.current_score)

        self.notifier.notify(room.room_id, guess_event)
        self.notifier.notify(room.room_id, WordCompleted(
            word=entry.word, current_score=run.current_score, next_word_length=len(run.target_word),
        ))
        self.notifier.notify(room.room_id, TurnChanged(
            current_turn_player_id=opener,
            current_turn_player_name=room.username_of(opener),
        ))
        return RunResult(
            run=run, outcome=OUTCOME_WORD_WON, total_words=self.total_words(), room=room,
            guess=guess, evaluation=evaluation, finished_word=entry,
            next_turn_player_id=opener, users=users,
        )

    def abandon_coop_run(self, room_id: str, user_id: str) -> RunResult:
        """
        Either player ends the shared run for both. Abandoning a run that
        already ended returns it untouched.
        """
        room = self.room_service.require_room(room_id)
        with self.locks.hold(self.room_service.lock_key(room.room_id)):
            room = self.room_service.require_room(room.room_id)
            self.room_service.require_member(room, user_id)

            run = self.get_coop_run(room.room_id)
            if run is None:
                return self._close_orphaned_room(room)

            final_score = run.current_score
            entry = self.fail_run(run)
            room.status = RoomStatus.FINISHED
            self._commit(run, room)
            users = self._update_both(room, RunStatus.FAILED.value, 0, final_score)
            logger.info(f"Coop run {run.run_id} abandoned by {user_id} with score {final_score}")

            self.notifier.notify(room.room_id, PlayerAbandoned(
                player_id=user_id, player_name=room.username_of(user_id),
            ))
            self.notifier.notify(room.room_id, GameOver(
                final_score=final_score,
                words_completed=run.words_completed,
                reason=OUTCOME_ABANDONED,
                last_word=entry.word if entry else None,
            ))
            return RunResult(
                run=run, outcome=OUTCOME_ABANDONED, total_words=self.total_words(), room=room,
                finished_word=entry, final_score=final_score, users=users,
            )

    def _close_orphaned_room(self, room: Room) -> RunResult:
        """
        No active run left. A room still marked playing (its run ended but
        the room write was lost) is finished here so the pair can move on.
        """
        latest = self.run_store.find_latest_for_room(room.room_id)
        if room.status is RoomStatus.PLAYING:
            room.status = RoomStatus.FINISHED
            self.room_store.save(room)
            final_score = latest.current_score if latest else 0
            users = self._update_both(room, RunStatus.FAILED.value, 0, final_score)
            logger.warning(f"Room {room.room_id} was playing without an active run, closed it")
            self.notifier.notify(room.room_id, GameOver(
                final_score=final_score,
                words_completed=latest.words_completed if latest else 0,
                reason=OUTCOME_ABANDONED,
                last_word=None,
            ))
            if latest is not None:
                return RunResult(run=latest, outcome=OUTCOME_ABANDONED, total_words=self.total_words(),
                                 room=room, final_score=final_score, users=users)

        if latest is None:
            raise NotFoundError("No run found for this room")
        return RunResult(run=latest, outcome=OUTCOME_UNCHANGED,
                         total_words=self.total_words(), room=room)

    def _commit(self, run: RunState, room: Room) -> None:
        """
        Save a run transition together with its room. When the room write
        loses a version race the run is put back as it was, so the pair
        never ends up half applied.
        """
        previous = self.run_store.get(run.run_id)
        self.run_store.save(run)
        try:
            self.room_store.save(room)
        except ConflictError:
            if previous is not None:
                previous.version = run.version
                self.run_store.save(previous)
            logger.warning(f"Room {room.room_id} changed under run {run.run_id}, transition rolled back")
            raise

    def request_rematch(self, room_id: str, user_id: str) -> Room:
        room = self.room_service.require_room(room_id)
        with self.locks.hold(self.room_service.lock_key(room.room_id)):
            room = self._require_finished_pair(room.room_id, user_id)
            player = room.get_player(user_id)
            player.wants_rematch = True
            self.room_store.save(room)

            logger.info(f"{player.username} asked for a rematch in room {room.room_id}")
            self.notifier.notify(room.room_id, RematchRequested(
                requester_id=user_id, requester_name=player.username,
            ))
            return room

    def respond_rematch(self, room_id: str, user_id: str,
                        accepted: bool) -> Tuple[Room, Optional[Room], Optional[RunState]]:
        """
        Answer the other player's rematch request.

        A refusal clears both flags, so a new request is needed. Acceptance
        opens a new room with the player order swapped and starts its run.

        Returns:
            (old_room, new_room, new_run); the last two are None unless the
            rematch started.
        """
        room = self.room_service.require_room(room_id)
        with self.locks.hold(self.room_service.lock_key(room.room_id)):
            room = self._require_finished_pair(room.room_id, user_id)
            responder = room.get_player(user_id)
            if not any(p.wants_rematch for p in room.players if p.user_id != user_id):
                raise ConflictError("There is no rematch request to answer")

            if not accepted:
                for player in room.players:
                    player.wants_rematch = False
                self.room_store.save(room)
                logger.info(f"{responder.username} refused the rematch in room {room.room_id}")
                self.notifier.notify(room.room_id, RematchResponded(
                    responder_id=user_id, responder_name=responder.username, accepted=False,
                ))
                return room, None, None

            responder.wants_rematch = True
            new_room = self.room_service.create_rematch_room(room)
            new_run = self.start_coop_run(new_room)

            self.notifier.notify(room.room_id, RematchResponded(
                responder_id=user_id,
                responder_name=responder.username,
                accepted=True,
                new_room_id=new_room.room_id,
            ))
            return room, new_room, new_run

    def _require_finished_pair(self, room_id: str, user_id: str) -> Room:
        room = self.room_service.require_room(room_id)
        self.room_service.require_member(room, user_id)
        if room.status is not RoomStatus.FINISHED or len(room.players) != 2:
            raise ConflictError("Rematch is only available once the game is over")
        return room

    def _update_both(self, room: Room, status: str, current_score: int, record: int):
        users = []
        for player in room.players:
            user = self.users_service.update_progress(player.user_id, status, current_score, record=record)
            if user is not None:
                users.append(user)
        return users
