from django.db import IntegrityError, transaction
from django.test import TestCase
from assignment.models import Team, User, PullRequest, ReviewerAssignment


class TeamModelTest(TestCase):
    def test_create_team(self):
        """Тест создания команды"""
        team = Team.objects.create(name="backend")
        self.assertEqual(team.pk, "backend")
        self.assertEqual(str(team), "backend")


class UserModelTest(TestCase):
    def setUp(self):
        self.team = Team.objects.create(name="backend")
        self.user = User.objects.create(
            id="user1",
            username="John Doe",
            is_active=True,
            team=self.team
        )

    def test_create_user(self):
        """Тест создания пользователя"""
        self.assertEqual(self.user.id, "user1")
        self.assertEqual(self.user.username, "John Doe")
        self.assertTrue(self.user.is_active)
        self.assertEqual(str(self.user), "John Doe (user1)")

    def test_active_teammates_excludes_inactive_and_listed(self):
        User.objects.create(id="user2", username="Jane", is_active=True, team=self.team)
        User.objects.create(id="user3", username="Jim", is_active=False, team=self.team)

        teammates = User.objects.active_teammates("backend", exclude_ids={"user1"})

        self.assertEqual([user.id for user in teammates], ["user2"])


class PullRequestModelTest(TestCase):
    def setUp(self):
        self.team = Team.objects.create(name="backend")
        self.author = User.objects.create(id="author1", username="Author", team=self.team)
        self.reviewer1 = User.objects.create(id="reviewer1", username="Reviewer 1", team=self.team)
        self.reviewer2 = User.objects.create(id="reviewer2", username="Reviewer 2", team=self.team)
        self.pr = PullRequest.objects.create(
            id="pr-1",
            name="Test PR",
            author=self.author
        )

    def test_create_pull_request(self):
        """Тест создания PR"""
        self.pr.add_reviewer(self.reviewer1, 0)
        self.pr.add_reviewer(self.reviewer2, 1)

        self.assertEqual(self.pr.status, PullRequest.Status.OPEN)
        self.assertFalse(self.pr.is_merged)
        self.assertIsNone(self.pr.merged_at)
        self.assertEqual(self.pr.reviewers.count(), 2)
        self.assertEqual(self.pr.reviewer_ids, ["reviewer1", "reviewer2"])

    def test_reviewer_ids_ordered_by_slot(self):
        self.pr.add_reviewer(self.reviewer2, 1)
        self.pr.add_reviewer(self.reviewer1, 0)

        pr = PullRequest.objects.with_reviewers().get(id="pr-1")

        self.assertEqual(pr.reviewer_ids, ["reviewer1", "reviewer2"])

    def test_remove_reviewer_returns_slot(self):
        self.pr.add_reviewer(self.reviewer1, 0)
        self.pr.add_reviewer(self.reviewer2, 1)

        self.assertEqual(self.pr.remove_reviewer("reviewer2"), 1)
        self.assertIsNone(self.pr.remove_reviewer("reviewer2"))
        self.assertEqual(self.pr.reviewer_ids, ["reviewer1"])

    def test_duplicate_reviewer_rejected(self):
        """Один ревьювер не может быть назначен дважды"""
        self.pr.add_reviewer(self.reviewer1, 0)

        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                self.pr.add_reviewer(self.reviewer1, 1)

    def test_reviewed_by(self):
        self.pr.add_reviewer(self.reviewer1, 0)

        self.assertEqual([pr.id for pr in PullRequest.objects.reviewed_by("reviewer1")], ["pr-1"])
        self.assertEqual(list(PullRequest.objects.reviewed_by("reviewer2")), [])

    def test_pr_delete_cascades_to_assignments(self):
        self.pr.add_reviewer(self.reviewer1, 0)

        self.pr.delete()

        self.assertFalse(ReviewerAssignment.objects.exists())
        self.assertTrue(User.objects.filter(id="reviewer1").exists())

    def test_pr_string_representation(self):
        """Тест строкового представления PR"""
        self.assertEqual(str(self.pr), "Test PR (pr-1)")
