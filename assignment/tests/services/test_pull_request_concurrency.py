import threading

from django.db import DatabaseError, connection
from django.test import TransactionTestCase
from assignment.errors import AssignmentError, PRMerged
from assignment.models import Team, User, PullRequest
from assignment.random_source import ReviewerPicker
from assignment.services import PullRequestService

ROUNDS = 3


def run_concurrently(*calls):
    """
    Запускает вызовы в отдельных потоках одновременно (через барьер).

    Returns:
        list: Для каждого вызова ('ok', результат), ('err', исключение)
              для ошибок домена и БД или ('unexpected', исключение)
    """
    barrier = threading.Barrier(len(calls), timeout=10)
    outcomes = [None] * len(calls)

    def worker(index, call):
        try:
            barrier.wait()
            outcomes[index] = ('ok', call())
        except (AssignmentError, DatabaseError) as e:
            outcomes[index] = ('err', e)
        except Exception as e:
            outcomes[index] = ('unexpected', e)
        finally:
            connection.close()

    threads = [threading.Thread(target=worker, args=(index, call)) for index, call in enumerate(calls)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    return outcomes


class PullRequestConcurrencyTest(TransactionTestCase):
    """
    Параллельные операции над одним PR. На PostgreSQL строка PR блокируется
    и вызовы выполняются по очереди; на SQLite конкурирующий писатель может
    получить ошибку БД, но частичных изменений не остается.
    """

    def setUp(self):
        self.team = Team.objects.create(name="T")
        self.author = User.objects.create(id="a", username="Author", team=self.team)
        self.users = {
            user_id: User.objects.create(id=user_id, username=user_id.upper(), team=self.team)
            for user_id in ("b", "c", "d", "e", "f")
        }
        self.picker = ReviewerPicker(seed=13)

    def _open_pr(self, pr_id):
        pr = PullRequest.objects.create(id=pr_id, name="Concurrent PR", author=self.author)
        pr.add_reviewer(self.users["b"], 0)
        pr.add_reviewer(self.users["c"], 1)
        return pr

    def _assert_outcome_classified(self, outcome):
        self.assertIsNotNone(outcome)
        self.assertIn(outcome[0], ('ok', 'err'), msg=repr(outcome))

    def _assert_reviewer_set_consistent(self, pr):
        reviewer_ids = pr.reviewer_ids
        self.assertEqual(len(reviewer_ids), 2)
        self.assertEqual(len(set(reviewer_ids)), 2)
        self.assertNotIn("a", reviewer_ids)
        self.assertTrue(set(reviewer_ids) <= set(self.users))

    def test_parallel_reassign_of_both_reviewers(self):
        """Два параллельных переназначения на одном PR не ломают набор ревьюверов"""
        for round_number in range(ROUNDS):
            pr_id = f"p-{round_number}"
            with self.subTest(pr_id=pr_id):
                self._open_pr(pr_id)

                outcomes = run_concurrently(
                    lambda: PullRequestService.reassign_reviewer(pr_id, "b", picker=self.picker),
                    lambda: PullRequestService.reassign_reviewer(pr_id, "c", picker=self.picker),
                )

                pr = PullRequest.objects.with_reviewers().get(id=pr_id)
                self._assert_reviewer_set_consistent(pr)

                for old_id, outcome in zip(("b", "c"), outcomes):
                    self._assert_outcome_classified(outcome)
                    if outcome[0] == 'ok':
                        _, new_reviewer = outcome[1]
                        self.assertNotIn(old_id, pr.reviewer_ids)
                        self.assertIn(new_reviewer.id, pr.reviewer_ids)
                    else:
                        self.assertIn(old_id, pr.reviewer_ids)

                if connection.vendor == 'postgresql':
                    # второй вызов видит результат первого
                    self.assertEqual([outcome[0] for outcome in outcomes], ['ok', 'ok'])
                    self.assertTrue(set(pr.reviewer_ids).isdisjoint({"b", "c"}))

    def test_parallel_reassign_and_merge(self):
        """Переназначение и мерж одного PR выполняются целиком или не выполняются"""
        for round_number in range(ROUNDS):
            pr_id = f"p-{round_number}"
            with self.subTest(pr_id=pr_id):
                self._open_pr(pr_id)

                reassign_outcome, merge_outcome = run_concurrently(
                    lambda: PullRequestService.reassign_reviewer(pr_id, "b", picker=self.picker),
                    lambda: PullRequestService.merge_pull_request(pr_id),
                )

                pr = PullRequest.objects.with_reviewers().get(id=pr_id)
                self._assert_reviewer_set_consistent(pr)
                self._assert_outcome_classified(reassign_outcome)
                self._assert_outcome_classified(merge_outcome)

                if merge_outcome[0] == 'ok':
                    self.assertEqual(pr.status, PullRequest.Status.MERGED)
                    self.assertIsNotNone(pr.merged_at)
                else:
                    self.assertEqual(pr.status, PullRequest.Status.OPEN)
                    self.assertIsNone(pr.merged_at)

                if reassign_outcome[0] == 'ok':
                    _, new_reviewer = reassign_outcome[1]
                    self.assertEqual(pr.reviewer_ids, [new_reviewer.id, "c"])
                else:
                    self.assertEqual(pr.reviewer_ids, ["b", "c"])

                if connection.vendor == 'postgresql':
                    self.assertEqual(merge_outcome[0], 'ok')
                    if reassign_outcome[0] == 'err':
                        self.assertIsInstance(reassign_outcome[1], PRMerged)
