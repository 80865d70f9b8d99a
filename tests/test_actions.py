from flask_record.actions import InteractsWith, LoadsFrom
from flask_record.exceptions import ValidationError
from tests import BaseTestCase
from tests.models import create_models, seed_backend, HomeValidator


class ActionTestCase(BaseTestCase):

    def setUp(self):
        super(ActionTestCase, self).setUp()
        seed_backend(self.backend)
        self.models = create_models(self.api)

    def test_interacts_with(self):
        home = self.models.Home.find(1)
        self.reset_requests()

        response = home.rent_to(2, '500')

        self.assertEqual([('POST', 'http://localhost/api/v1/home/1/rent-to')], self.requests)
        self.assertEqual({
            'id': 1,
            'source': 'rent-to',
            'params': {'user': 2, 'amount': '500'}
        }, response)

    def test_interacts_with_validation(self):
        home = self.models.Home.find(1)
        user = self.models.User.find(2)
        self.reset_requests()

        with self.assertRaises(ValidationError) as cm:
            home.rent_to(user, None)

        self.assertEqual({
            'user': ['User is not a number'],
            'amount': ["Amount can't be blank"]
        }, cm.exception.errors)
        self.assertEqual(400, cm.exception.as_dict()['status'])
        self.assertNoRequests()

    def test_interacts_with_without_validator_method(self):
        home = self.models.Home.find(1)
        user = self.models.User.find(2)

        response = home.change_owner(user)

        self.assertRequested('POST', '/api/v1/home/1/change-owner')
        self.assertEqual({'new_owner': 2}, response['params'])

    def test_models_are_sent_as_id(self):
        group = self.models.Group.find(1)
        users = self.models.User.all()

        response = group.invite(users[0])
        self.assertEqual({'user_id': 1}, response['params'])

        response = group.invite(users)
        self.assertEqual({'user_id': [1, 2]}, response['params'])

    def test_loads_from(self):
        group = self.models.Group.find(1)
        self.reset_requests()

        response = group.metrics(period='week')

        self.assertEqual([('GET', 'http://localhost/api/v1/group/1/metrics?period=week')], self.requests)
        self.assertEqual({'id': 1, 'source': 'metrics', 'params': {'period': 'week'}}, response)

    def test_collection_action_url(self):
        group = self.models.Group()

        self.assertEqual('http://localhost/api/v1/group/bulk', InteractsWith(group, 'bulk').url)
        self.assertEqual('http://localhost/api/v1/group/1/stats', LoadsFrom(self.models.Group(id=1), 'stats').url)
        self.assertEqual('<LoadsFrom GET http://localhost/api/v1/group/bulk>', repr(LoadsFrom(group, 'bulk')))

    def test_validator_instance(self):
        self.models.Home.meta.action_validator = HomeValidator()
        try:
            home = self.models.Home(id=1)
            with self.assertRaises(ValidationError):
                home.rent_to(None, 10)
        finally:
            self.models.Home.meta.action_validator = HomeValidator
        self.assertNoRequests()
