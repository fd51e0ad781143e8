from django.contrib.auth import get_user_model
from django.test import RequestFactory, TestCase

from accounts.client import AuthServiceClient
from accounts.models import Account
from accounts.permissions import IsLecturer, IsStudent
from gateway.tests import factories


class AccountSignalTests(TestCase):
    def test_account_is_created_for_new_user(self):
        user = get_user_model().objects.create_user(username="new", password="password")

        self.assertEqual(Account.objects.get(user=user).role, Account.Role.STUDENT)


class AuthServiceClientTests(TestCase):
    def setUp(self):
        self.client_service = AuthServiceClient()
        self.student = factories.create_student(first_name="Алиса", last_name="Иванова")
        self.lecturer = factories.create_lecturer(
            first_name="Пётр", last_name="Лекторов", email="Lecturer@Example.com"
        )

    def test_account_data(self):
        data = self.client_service.get_account_data(self.student.pk)

        self.assertEqual(data.user_id, self.student.pk)
        self.assertEqual(data.name, "Алиса")
        self.assertEqual(data.surname, "Иванова")
        self.assertEqual(data.role, Account.Role.STUDENT)
        self.assertFalse(data.is_external_auth)

    def test_unknown_account(self):
        self.assertIsNone(self.client_service.get_account_data(999999))

    def test_accounts_data_keeps_order_and_skips_unknown(self):
        accounts = self.client_service.get_accounts_data(
            [self.lecturer.pk, 999999, self.student.pk, self.lecturer.pk]
        )

        self.assertEqual(
            [account.user_id for account in accounts], [self.lecturer.pk, self.student.pk]
        )

    def test_account_by_email_is_case_insensitive(self):
        data = self.client_service.get_account_by_email("lecturer@example.com")

        self.assertEqual(data.user_id, self.lecturer.pk)

    def test_all_lecturers_sorted_by_surname(self):
        other = factories.create_lecturer(first_name="Анна", last_name="Абрамова")

        lecturers = self.client_service.get_all_lecturers()

        self.assertEqual([account.user_id for account in lecturers], [other.pk, self.lecturer.pk])


class RolePermissionTests(TestCase):
    def setUp(self):
        self.factory = RequestFactory()

    def request_for(self, user):
        request = self.factory.get("/")
        request.user = user
        return request

    def test_roles(self):
        student = factories.create_student()
        lecturer = factories.create_lecturer()

        self.assertTrue(IsStudent().has_permission(self.request_for(student), None))
        self.assertFalse(IsLecturer().has_permission(self.request_for(student), None))
        self.assertTrue(IsLecturer().has_permission(self.request_for(lecturer), None))
        self.assertFalse(IsStudent().has_permission(self.request_for(lecturer), None))
