"""
Input pipeline tests: loading, schema validation and action mapping.
"""

import pytest

from intune_role_manager.libs.core.constants import RoleConstants
from intune_role_manager.libs.core.exceptions import (
    EmptyInputError, InputNotFoundError, InputReadError, SchemaMismatchError, UnsupportedFormatError
)
from intune_role_manager.libs.input import (
    RecordSchema, ResourceActionRecord, detect_format, load_lines, load_records,
    map_actions, map_lines, qualify_action, validate_header, validate_records
)

from test_constants import CsvTestConstants, TestUtilities


class TestDetectFormat:
    """Test input format detection"""

    def test_csv_extension_is_delimited(self):
        assert detect_format("roles/permissions.csv") == RoleConstants.InputFormat.DELIMITED

    def test_extension_is_case_insensitive(self):
        assert detect_format("PERMISSIONS.CSV") == RoleConstants.InputFormat.DELIMITED

    def test_txt_extension_is_line_oriented(self):
        assert detect_format("actions.txt") == RoleConstants.InputFormat.LINES
        assert detect_format("actions.lst") == RoleConstants.InputFormat.LINES

    def test_override_wins_over_extension(self):
        assert detect_format("actions.csv", "lines") == RoleConstants.InputFormat.LINES

    def test_unsupported_extension_names_extension(self):
        """Test that the error message names the rejected extension"""
        with pytest.raises(UnsupportedFormatError) as exc_info:
            detect_format("permissions.xlsx")

        assert ".xlsx" in str(exc_info.value)
        assert ".csv" in str(exc_info.value)

    def test_missing_extension(self):
        with pytest.raises(UnsupportedFormatError) as exc_info:
            detect_format("permissions")

        assert "(none)" in str(exc_info.value)

    def test_unsupported_override(self):
        with pytest.raises(UnsupportedFormatError):
            detect_format("permissions.csv", "json")


class TestLoadRecords:
    """Test delimited file loading"""

    def test_load_rows(self, tmp_path):
        # Arrange
        path = TestUtilities.write_file(tmp_path, "p.csv", CsvTestConstants.MIXED_CSV)

        # Act
        rows = load_records(path)

        # Assert
        assert len(rows) == 4
        assert rows[0] == {
            "ResourceAction": "ManagedDevices_Read",
            "Allowed": "Yes",
            "Description": "Read devices",
        }

    def test_missing_file_raises_input_not_found(self, tmp_path):
        """Test that a missing path raises an error that is also a FileNotFoundError"""
        with pytest.raises(InputNotFoundError) as exc_info:
            load_records(tmp_path / "missing.csv")

        assert isinstance(exc_info.value, FileNotFoundError)
        assert "missing.csv" in str(exc_info.value)

    def test_directory_raises_input_not_found(self, tmp_path):
        with pytest.raises(InputNotFoundError):
            load_records(tmp_path)

    def test_header_only_raises_empty_input(self, tmp_path):
        path = TestUtilities.write_csv(tmp_path, [])

        with pytest.raises(EmptyInputError):
            load_records(path)

    def test_empty_file_raises_empty_input(self, tmp_path):
        """Test that a zero-byte file counts as zero records"""
        path = TestUtilities.write_file(tmp_path, "p.csv", "")

        with pytest.raises(EmptyInputError):
            load_records(path)

    def test_invalid_utf8_raises_input_read_error(self, tmp_path):
        """Test that undecodable bytes are reported with the file name"""
        path = tmp_path / "p.csv"
        path.write_bytes(CsvTestConstants.INVALID_UTF8_CSV)

        with pytest.raises(InputReadError) as exc_info:
            load_records(path)

        assert str(path) in str(exc_info.value)

    def test_utf8_bom_is_stripped(self, tmp_path):
        """Test that Excel-style BOM exports keep the first column name intact"""
        path = TestUtilities.write_file(
            tmp_path, "p.csv", "ResourceAction,Allowed\nManagedDevices_Read,Yes\n", encoding="utf-8-sig"
        )

        rows = load_records(path)

        assert "ResourceAction" in rows[0]

    def test_custom_delimiter(self, tmp_path):
        path = TestUtilities.write_file(tmp_path, "p.csv", "ResourceAction;Allowed\nAudit_Read;Yes\n")

        rows = load_records(path, delimiter=";")

        assert rows == [{"ResourceAction": "Audit_Read", "Allowed": "Yes"}]

    def test_blank_lines_are_skipped(self, tmp_path):
        path = TestUtilities.write_file(tmp_path, "p.csv", "ResourceAction,Allowed\n\nAudit_Read,Yes\n\n")

        assert len(load_records(path)) == 1


class TestLoadLines:
    """Test line-oriented file loading"""

    def test_non_blank_lines_returned_in_order(self, tmp_path):
        path = TestUtilities.write_file(tmp_path, "a.txt", "ManagedDevices_Read\n\nAudit_Read\r\n   \n")

        assert load_lines(path) == ["ManagedDevices_Read", "Audit_Read"]

    def test_no_trimming_beyond_line_terminators(self, tmp_path):
        path = TestUtilities.write_file(tmp_path, "a.txt", " Audit_Read \n")

        assert load_lines(path) == [" Audit_Read "]

    def test_blank_file_raises_empty_input(self, tmp_path):
        path = TestUtilities.write_file(tmp_path, "a.txt", "\n\n  \n")

        with pytest.raises(EmptyInputError):
            load_lines(path)

    def test_invalid_utf8_raises_input_read_error(self, tmp_path):
        path = tmp_path / "a.txt"
        path.write_bytes(b"Audit_\xff\xfeRead\n")

        with pytest.raises(InputReadError):
            load_lines(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(InputNotFoundError):
            load_lines(tmp_path / "nope.txt")


class TestSchemaValidator:
    """Test static schema validation of delimited records"""

    def test_valid_records(self):
        # Arrange
        rows = [
            {"ResourceAction": "AndroidFota_Read", "Allowed": "Yes", "Description": "Read"},
            {"ResourceAction": "AndroidFota_Assign", "Allowed": "No", "Description": ""},
        ]

        # Act
        records = validate_records(rows)

        # Assert
        assert records == [
            ResourceActionRecord("AndroidFota_Read", True, "Read"),
            ResourceActionRecord("AndroidFota_Assign", False, ""),
        ]

    def test_missing_allowed_column(self):
        """Test that a missing Allowed column is named in the error"""
        rows = [{"ResourceAction": "AndroidFota_Read", "Description": "Read"}]

        with pytest.raises(SchemaMismatchError) as exc_info:
            validate_records(rows)

        assert exc_info.value.field == "Allowed"
        assert "'Allowed'" in str(exc_info.value)

    def test_missing_resource_action_column(self):
        with pytest.raises(SchemaMismatchError) as exc_info:
            validate_records([{"Action": "x", "Allowed": "Yes"}])

        assert exc_info.value.field == "ResourceAction"

    def test_extra_columns_tolerated(self):
        rows = [{"ResourceAction": "Audit_Read", "Allowed": "YES", "Owner": "it-ops"}]

        records = validate_records(rows)

        assert records == [ResourceActionRecord("Audit_Read", True, None)]

    def test_fail_fast_on_first_bad_row(self):
        """Test that the first row with a missing value aborts validation"""
        rows = [
            {"ResourceAction": "Audit_Read", "Allowed": "Yes"},
            {"ResourceAction": "", "Allowed": "Yes"},
            {"ResourceAction": "Audit_Write", "Allowed": None},
        ]

        with pytest.raises(SchemaMismatchError) as exc_info:
            validate_records(rows)

        assert exc_info.value.row == 2
        assert exc_info.value.field == "ResourceAction"

    def test_short_row_reports_missing_value(self):
        rows = [{"ResourceAction": "Audit_Read", "Allowed": None}]

        with pytest.raises(SchemaMismatchError) as exc_info:
            validate_records(rows)

        assert "Row 1" in str(exc_info.value)
        assert exc_info.value.field == "Allowed"

    def test_overlong_row_is_rejected(self):
        """Test that values beyond the header columns are reported"""
        rows = [{"ResourceAction": "Audit_Read", "Allowed": "Yes", None: ["extra"]}]

        with pytest.raises(SchemaMismatchError) as exc_info:
            validate_records(rows)

        assert "more values than header columns" in str(exc_info.value)

    def test_unrecognized_allowed_token_is_not_allowed(self):
        records = validate_records([{"ResourceAction": "Audit_Read", "Allowed": "Maybe"}])

        assert records[0].allowed is False

    def test_empty_allowed_value_is_not_allowed(self):
        """Test that an empty Allowed cell filters the row out instead of aborting"""
        rows = [
            {"ResourceAction": "Audit_Read", "Allowed": "Yes"},
            {"ResourceAction": "Audit_Delete", "Allowed": ""},
        ]

        records = validate_records(rows)

        assert records == [
            ResourceActionRecord("Audit_Read", True, None),
            ResourceActionRecord("Audit_Delete", False, None),
        ]

    def test_empty_resource_action_is_rejected(self):
        with pytest.raises(SchemaMismatchError) as exc_info:
            validate_records([{"ResourceAction": "  ", "Allowed": "Yes"}])

        assert exc_info.value.field == "ResourceAction"

    def test_validate_header_with_custom_schema(self):
        schema = RecordSchema(required=("Action",))

        validate_header(["Action", "Other"], schema)

        with pytest.raises(SchemaMismatchError):
            validate_header(["Other"], schema)


class TestActionMapper:
    """Test permission identifier mapping"""

    def test_qualify_action(self):
        assert qualify_action("ManagedDevices_Read") == "Microsoft.Intune_ManagedDevices_Read"
        assert qualify_action("Audit_Read", "Contoso.Custom") == "Contoso.Custom_Audit_Read"

    def test_allowed_yes_yields_one_identifier(self):
        records = [ResourceActionRecord("AndroidFota_Read", True)]

        assert map_actions(records) == ("Microsoft.Intune_AndroidFota_Read",)

    def test_allowed_no_yields_none(self):
        records = [ResourceActionRecord("AndroidFota_Assign", False)]

        assert map_actions(records) == ()

    def test_duplicates_are_collapsed(self):
        records = [
            ResourceActionRecord("Audit_Read", True),
            ResourceActionRecord("Audit_Read", True),
            ResourceActionRecord("Roles_Read", True),
        ]

        assert map_actions(records) == ("Microsoft.Intune_Audit_Read", "Microsoft.Intune_Roles_Read")

    def test_no_case_normalization(self):
        records = [ResourceActionRecord("managedDevices_read", True)]

        assert map_actions(records) == ("Microsoft.Intune_managedDevices_read",)

    def test_every_line_yields_one_identifier(self):
        lines = ["ManagedDevices_Read", "Audit_Read"]

        actions = map_lines(lines)

        assert len(actions) == 2
        assert all(a.startswith("Microsoft.Intune_") for a in actions)

    def test_line_order_does_not_change_the_set(self):
        lines = ["ManagedDevices_Read", "Audit_Read", "Roles_Read"]

        assert set(map_lines(lines)) == set(map_lines(list(reversed(lines))))

    def test_mixed_csv_end_to_end(self, tmp_path):
        """Test load, validate and map on a realistic file"""
        path = TestUtilities.write_file(tmp_path, "p.csv", CsvTestConstants.MIXED_CSV)

        actions = map_actions(validate_records(load_records(path)))

        assert actions == CsvTestConstants.MIXED_EXPECTED
