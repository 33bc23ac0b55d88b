from django.test import SimpleTestCase

from reviewers.domain import PRStatus, PullRequest
from reviewers.errors import (
    InvalidPRID,
    InvalidPRName,
    InvalidUserID,
    NoReviewerCandidate,
    PRAlreadyExists,
    PRAlreadyMerged,
    PRAuthorNotFound,
    PRNotFound,
    ReviewerNotAssigned,
)
from reviewers.services import PullRequestService
from reviewers.tests.fakes import InMemoryStorage


class PullRequestServiceTest(SimpleTestCase):
    def setUp(self):
        self.storage = InMemoryStorage()
        self.storage.add_team(
            "backend",
            ("u1", True), ("u2", True), ("u3", True), ("u4", True), ("u5", False),
        )
        self.storage.add_team("solo", ("s1", True), ("s2", False))
        _, users, prs, _ = self.storage.stores()
        self.service = PullRequestService(prs, users)

    def test_create_pr_success(self):
        """Тест успешного создания PR"""
        pr = self.service.create_pr("pr-1", "Add X", "u1")

        self.assertEqual(pr.id, "pr-1")
        self.assertEqual(pr.name, "Add X")
        self.assertEqual(pr.author_id, "u1")
        self.assertEqual(pr.status, PRStatus.OPEN)
        self.assertIsNone(pr.merged_at)
        self.assertIn("pr-1", self.storage.prs)

    def test_create_pr_reviewers_from_valid_pool(self):
        """Ревьюверы: активные коллеги автора, не больше двух, без автора"""
        pr = self.service.create_pr("pr-1", "Add X", "u1")

        self.assertTrue(1 <= len(pr.assigned_reviewers) <= 2)
        self.assertNotIn("u1", pr.assigned_reviewers)
        self.assertNotIn("u5", pr.assigned_reviewers)
        self.assertTrue(set(pr.assigned_reviewers) <= {"u2", "u3", "u4"})
        self.assertEqual(len(set(pr.assigned_reviewers)), len(pr.assigned_reviewers))

    def test_create_pr_picks_first_candidates_by_id(self):
        """Выбор кандидатов детерминирован: первые по id"""
        pr = self.service.create_pr("pr-1", "Add X", "u1")

        self.assertEqual(pr.assigned_reviewers, ["u2", "u3"])

    def test_create_pr_respects_reviewer_cap(self):
        """Лимит ревьюверов настраивается"""
        _, users, prs, _ = self.storage.stores()
        service = PullRequestService(prs, users, reviewers_per_pr=1)

        pr = service.create_pr("pr-1", "Add X", "u1")

        self.assertEqual(pr.assigned_reviewers, ["u2"])

    def test_create_pr_single_candidate(self):
        """Если кандидат один, назначается один ревьювер"""
        self.storage.add_team("pair", ("p1", True), ("p2", True))

        pr = self.service.create_pr("pr-1", "Add X", "p1")

        self.assertEqual(pr.assigned_reviewers, ["p2"])

    def test_create_pr_validation_errors(self):
        """Тест валидации входных данных"""
        cases = [
            (("", "name", "u1"), InvalidPRID),
            (("pr-1", "", "u1"), InvalidPRName),
            (("pr-1", "name", ""), InvalidUserID),
        ]
        for args, error in cases:
            with self.subTest(error=error.__name__):
                with self.assertRaises(error):
                    self.service.create_pr(*args)
        self.assertEqual(self.storage.prs, {})

    def test_create_pr_author_not_found(self):
        """Тест создания PR с несуществующим автором"""
        with self.assertRaises(PRAuthorNotFound) as context:
            self.service.create_pr("pr-1", "Add X", "ghost")

        self.assertEqual(context.exception.code, 'NOT_FOUND')

    def test_create_pr_duplicate(self):
        """Тест создания дубликата PR"""
        self.service.create_pr("pr-1", "Add X", "u1")

        with self.assertRaises(PRAlreadyExists) as context:
            self.service.create_pr("pr-1", "Add Y", "u2")

        self.assertEqual(context.exception.code, 'PR_EXISTS')
        self.assertEqual(self.storage.prs["pr-1"].name, "Add X")

    def test_create_pr_no_candidates(self):
        """Без активных коллег PR не создается"""
        with self.assertRaises(NoReviewerCandidate) as context:
            self.service.create_pr("pr-1", "Solo work", "s1")

        self.assertEqual(context.exception.code, 'NO_CANDIDATE')
        self.assertNotIn("pr-1", self.storage.prs)

    def test_merge_pr_success(self):
        """Тест успешного мержа PR"""
        self.service.create_pr("pr-1", "Add X", "u1")

        pr = self.service.merge_pr("pr-1")

        self.assertEqual(pr.status, PRStatus.MERGED)
        self.assertIsNotNone(pr.merged_at)

    def test_merge_pr_idempotent(self):
        """Повторный мерж возвращает тот же merged_at"""
        self.service.create_pr("pr-1", "Add X", "u1")

        first = self.service.merge_pr("pr-1")
        second = self.service.merge_pr("pr-1")

        self.assertEqual(second.status, PRStatus.MERGED)
        self.assertEqual(first.merged_at, second.merged_at)

    def test_merge_pr_not_found(self):
        """Тест мержа несуществующего PR"""
        with self.assertRaises(PRNotFound):
            self.service.merge_pr("nonexistent")

    def test_reassign_reviewer_success(self):
        """Тест успешного переназначения ревьювера"""
        self.service.create_pr("pr-1", "Add X", "u1")

        pr, new_reviewer_id = self.service.reassign_reviewer("pr-1", "u2")

        self.assertEqual(new_reviewer_id, "u4")
        self.assertNotIn("u2", pr.assigned_reviewers)
        self.assertIn("u4", pr.assigned_reviewers)
        self.assertIn("u3", pr.assigned_reviewers)
        self.assertEqual(len(pr.assigned_reviewers), 2)

    def test_reassign_reviewer_never_picks_author_or_inactive(self):
        """Замена: активный участник команды, не автор и не текущий ревьювер"""
        self.service.create_pr("pr-1", "Add X", "u1")

        _, new_reviewer_id = self.service.reassign_reviewer("pr-1", "u3")

        self.assertNotIn(new_reviewer_id, {"u1", "u2", "u3", "u5"})

    def test_reassign_reviewer_pr_not_found(self):
        """Тест переназначения в несуществующем PR"""
        with self.assertRaises(PRNotFound):
            self.service.reassign_reviewer("nonexistent", "u2")

    def test_reassign_reviewer_merged_pr(self):
        """Тест переназначения в мерженном PR"""
        self.service.create_pr("pr-1", "Add X", "u1")
        self.service.merge_pr("pr-1")

        with self.assertRaises(PRAlreadyMerged) as context:
            self.service.reassign_reviewer("pr-1", "u2")

        self.assertEqual(context.exception.code, 'PR_MERGED')
        self.assertEqual(self.storage.prs["pr-1"].assigned_reviewers, ["u2", "u3"])

    def test_reassign_reviewer_not_assigned(self):
        """Тест переназначения не назначенного ревьювера"""
        self.service.create_pr("pr-1", "Add X", "u1")

        with self.assertRaises(ReviewerNotAssigned) as context:
            self.service.reassign_reviewer("pr-1", "u4")

        self.assertEqual(context.exception.code, 'NOT_ASSIGNED')
        self.assertEqual(self.storage.prs["pr-1"].assigned_reviewers, ["u2", "u3"])

    def test_reassign_reviewer_no_candidate(self):
        """Нет свободных активных коллег для замены"""
        self.storage.add_pr(PullRequest(id="pr-9", name="Fix", author_id="s1", assigned_reviewers=["s2"]))

        with self.assertRaises(NoReviewerCandidate):
            self.service.reassign_reviewer("pr-9", "s2")

        self.assertEqual(self.storage.prs["pr-9"].assigned_reviewers, ["s2"])

    def test_reassign_reviewer_uses_old_reviewer_team(self):
        """Замену ищем в команде старого ревьювера, а не автора"""
        self.storage.add_team("frontend", ("f1", True), ("f2", True))
        self.storage.add_pr(PullRequest(id="pr-7", name="UI", author_id="u1", assigned_reviewers=["f1"]))

        pr, new_reviewer_id = self.service.reassign_reviewer("pr-7", "f1")

        self.assertEqual(new_reviewer_id, "f2")
        self.assertEqual(pr.assigned_reviewers, ["f2"])
