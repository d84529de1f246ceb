import json

from django.test import SimpleTestCase
from rest_framework import serializers

from registrations.serializers import RosterField


def participant(name, **overrides):
    row = {'full_name': name, 'age': 30, 'gender': 'Female', 'email': f'{name.split()[0].lower()}@example.com'}
    row.update(overrides)
    return row


class RosterFieldTests(SimpleTestCase):

    def setUp(self):
        self.field = RosterField()

    def test_accepts_json_string(self):
        rows = [participant('Ana Reyes'), participant('Ben Cruz')]
        value = self.field.to_internal_value(json.dumps(rows))
        self.assertEqual([row['full_name'] for row in value], ['Ana Reyes', 'Ben Cruz'])

    def test_first_invalid_row_is_named(self):
        rows = [
            participant('Ana Reyes'),
            participant('Ben Cruz'),
            participant('Carla Diaz', age=0),
            participant('Dan Lim', email='nope'),
        ]
        with self.assertRaises(serializers.ValidationError) as caught:
            self.field.to_internal_value(rows)

        self.assertIn('Participant 3: age', str(caught.exception.detail[0]))

    def test_rejects_empty_and_non_lists(self):
        for value in ([], '[]', '{"full_name": "Ana"}', 'not json'):
            with self.assertRaises(serializers.ValidationError):
                self.field.to_internal_value(value)
