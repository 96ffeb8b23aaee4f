"""Tests for record level tag checks"""

from sample_records import Clean, Messy

from tagmarshal.lint import lint_record


def describe_lint_record():
    def finds_nothing_on_clean_records(expect, cache):
        expect(lint_record(Clean, cache=cache)) == []

    def reports_each_mistake(expect, cache):
        issues = [(issue.field, issue.message) for issue in lint_record(Messy, cache=cache)]
        expect(issues) == [
            ("not_record", "Embedded field is not a record"),
            ("_hidden", "Private field is never encoded, tag ignored"),
            ("count", "Unknown option 'omitempy' is ignored"),
            ("tags", "Option 'string' has no effect on sequence fields"),
            ("quoted", "Malformed tag 'a\"b' at column 2"),
            ("hook", "Field type cannot be encoded or decoded"),
            ("flag", "Option 'omitempty' given more than once"),
            ("base.id", "Dropped: key 'id' is used by another field"),
        ]

    def names_the_record(expect, cache):
        issues = lint_record(Messy, cache=cache)
        expect({issue.record for issue in issues}) == {"Messy"}

    def checks_the_requested_namespace(expect, cache):
        issues = lint_record(Messy, tag_key="json", cache=cache)
        expect([(issue.field, issue.message) for issue in issues]) == [
            ("not_record", "Embedded field is not a record"),
            ("hook", "Field type cannot be encoded or decoded"),
            ("base.id", "Dropped: key 'id' is used by another field"),
        ]
        expect(lint_record(Clean, tag_key="json", cache=cache)) == []
