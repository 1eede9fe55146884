"""
Infinite Run Service

Single-player endless mode: one active run per player, words drawn from
the pool without repetition until the player fails or the pool runs out.
"""

import logging

from bson.objectid import ObjectId

from ..models.run import RunState, RunStatus
from .errors import NotFoundError, StateCorruptionError
from .run_engine import (
    OUTCOME_ABANDONED, OUTCOME_COMPLETED, OUTCOME_CONTINUE, OUTCOME_FAILED,
    OUTCOME_STARTED, OUTCOME_UNCHANGED, OUTCOME_WORD_WON, RunEngine, RunResult,
)

logger = logging.getLogger(__name__)


class InfiniteRunService(RunEngine):
    """
    Solo run state machine.

    active -> active (word won, pool not exhausted)
    active -> completed (word won, pool exhausted)
    active -> failed (attempts exhausted or abandoned)
    """

    def _lock_key(self, user_id: str) -> str:
        return f"solo:{user_id}"

    def start_run(self, user_id: str) -> RunResult:
        """Return the player's active run, creating one if there is none."""
        with self.locks.hold(self._lock_key(user_id)):
            run = self.run_store.find_active_for_user(user_id)
            if run is None:
                run = self._create_run(user_id)
                logger.info(f"Started infinite run {run.run_id} for user {user_id}")

            user = self.users_service.update_progress(user_id, RunStatus.ACTIVE.value, run.current_score)
            return RunResult(run=run, outcome=OUTCOME_STARTED, total_words=self.total_words(), user=user)

    def get_run(self, user_id: str) -> RunResult:
        run = self.run_store.find_active_for_user(user_id)
        if run is None:
            raise NotFoundError("No active infinite run")
        return RunResult(
            run=run,
            outcome=OUTCOME_UNCHANGED,
            total_words=self.total_words(),
            user=self.users_service.find_by_id(user_id),
        )

    def submit_guess(self, user_id: str, guess_word: str) -> RunResult:
        with self.locks.hold(self._lock_key(user_id)):
            run = self.run_store.find_active_for_user(user_id)
            if run is None:
                raise NotFoundError("No active infinite run")

            normalized = self.validate_guess(run, guess_word)
            guess, evaluation = self.apply_guess(run, normalized)

            if evaluation.is_correct:
                attained = run.current_score + 1
                entry = self.win_word(run)
                self.run_store.save(run)
                if run.status is RunStatus.COMPLETED:
                    logger.info(f"Run {run.run_id} completed the word pool with score {attained}")
                    user = self.users_service.update_progress(
                        user_id, RunStatus.COMPLETED.value, 0, record=attained)
                    outcome = OUTCOME_COMPLETED
                    final_score = attained
                else:
                    user = self.users_service.update_progress(
                        user_id, RunStatus.ACTIVE.value, run.current_score, record=run.current_score)
                    outcome = OUTCOME_WORD_WON
                    final_score = None
                return RunResult(
                    run=run, outcome=outcome, total_words=self.total_words(), user=user,
                    guess=guess, evaluation=evaluation, finished_word=entry, final_score=final_score,
                )

            if self.is_out_of_attempts(run):
                final_score = run.current_score
                entry = self.fail_run(run)
                self.run_store.save(run)
                logger.info(f"Run {run.run_id} failed on '{entry.word}' with score {final_score}")
                user = self.users_service.update_progress(
                    user_id, RunStatus.FAILED.value, 0, record=final_score)
                return RunResult(
                    run=run, outcome=OUTCOME_FAILED, total_words=self.total_words(), user=user,
                    guess=guess, evaluation=evaluation, finished_word=entry, final_score=final_score,
                )

            self.run_store.save(run)
            return RunResult(
                run=run, outcome=OUTCOME_CONTINUE, total_words=self.total_words(),
                user=self.users_service.find_by_id(user_id), guess=guess, evaluation=evaluation,
            )

    def abandon_run(self, user_id: str) -> RunResult:
        """
        Give up the active run as if its attempts were exhausted.

        Abandoning again after the run ended leaves it untouched.
        """
        with self.locks.hold(self._lock_key(user_id)):
            run = self.run_store.find_active_for_user(user_id)
            if run is None:
                latest = self.run_store.find_latest_for_user(user_id)
                if latest is None:
                    raise NotFoundError("No active infinite run")
                return RunResult(
                    run=latest, outcome=OUTCOME_UNCHANGED, total_words=self.total_words(),
                    user=self.users_service.find_by_id(user_id),
                )

            final_score = run.current_score
            entry = self.fail_run(run)
            self.run_store.save(run)
            logger.info(f"Run {run.run_id} abandoned by user {user_id} with score {final_score}")
            user = self.users_service.update_progress(
                user_id, RunStatus.FAILED.value, 0, record=final_score)
            return RunResult(
                run=run, outcome=OUTCOME_ABANDONED, total_words=self.total_words(), user=user,
                finished_word=entry, final_score=final_score,
            )

    def _create_run(self, user_id: str) -> RunState:
        first_word = self.pick_next_word(set())
        if not first_word:
            raise StateCorruptionError("No words available to start the infinite mode")

        run = RunState(
            run_id=str(ObjectId()),
            user_id=user_id,
            max_attempts=self.max_attempts,
            target_word=first_word,
            used_words=[first_word],
        )
        return self.run_store.insert(run)
