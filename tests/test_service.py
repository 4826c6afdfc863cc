import pytest

from fakes import command_failure
from svn_mcp.errors import ClassifiedSvnError, InvalidInputError
from svn_mcp.model import (
    AddOptions,
    CommitOptions,
    DeleteOptions,
    ErrorKind,
    StatusKind,
)
from svn_mcp.service import SvnService

NOT_A_WORKING_COPY = "svn: E155007: '/somewhere' is not a working copy"
CONNECTION_REFUSED = (
    "svn: E170013: Unable to connect to a repository at URL 'svn://host/repo'\n"
    "svn: E000111: Can't connect to host 'host': Connection refused"
)
LOG_OUTPUT = "\n".join(
    [
        "-" * 72,
        "r12 | alice | 2024-03-01 10:15:00 +0100 (Fri, 01 Mar 2024) | 1 line",
        "",
        "Fix the login form",
        "-" * 72,
    ]
)


@pytest.fixture
def service(config):
    return SvnService(config)


async def test_info_accepts_repository_urls(service, fake_svn):
    url = "http://octopus/svnayg/repo/crm-boot"
    fake = fake_svn(f"URL: {url}\nRevision: 7\nNode Kind: directory")

    response = await service.get_info(url)

    assert response.success
    assert response.data.url == url
    assert response.data.revision == 7
    assert fake.argvs == [["info", url]]
    assert response.working_directory == service.working_directory
    assert response.execution_time == 12


async def test_invalid_path_never_reaches_svn(service, fake_svn):
    fake = fake_svn()
    with pytest.raises(InvalidInputError) as excinfo:
        await service.add("file<name>.txt")
    assert "file<name>.txt" in str(excinfo.value)
    assert excinfo.value.classified.kind is ErrorKind.INVALID_INPUT
    assert fake.commands == []


async def test_info_rejects_illegal_path_characters(service, fake_svn):
    fake = fake_svn()
    with pytest.raises(InvalidInputError) as excinfo:
        await service.get_info("file<name>.txt")
    assert str(excinfo.value) == "Invalid path or URL: file<name>.txt"
    assert excinfo.value.classified.kind is ErrorKind.INVALID_INPUT
    assert fake.commands == []


async def test_not_a_working_copy_names_the_configured_directory(
    service, fake_svn
):
    fake_svn(command_failure(NOT_A_WORKING_COPY))
    with pytest.raises(ClassifiedSvnError) as excinfo:
        await service.get_status()
    classified = excinfo.value.classified
    assert classified.kind is ErrorKind.NOT_A_WORKING_COPY
    assert service.working_directory in classified.message
    assert classified.suggestion


async def test_exhausted_credentials_suggest_clearing_the_cache(
    service, fake_svn
):
    fake_svn(
        command_failure(
            "svn: E215004: No more credentials or we tried too many times.\n"
            "Authentication failed",
            command="svn log",
        )
    )
    with pytest.raises(ClassifiedSvnError) as excinfo:
        await service.get_log()
    classified = excinfo.value.classified
    assert classified.kind is ErrorKind.AUTHENTICATION_EXHAUSTED
    assert "credential cache" in classified.suggestion


async def test_status_falls_back_to_local_when_remote_fails(service, fake_svn):
    fake = fake_svn(
        command_failure(CONNECTION_REFUSED),
        "M       src/app.py\n?       notes.txt",
    )

    response = await service.get_status(show_all=True)

    assert response.success
    assert [(s.path, s.status) for s in response.data] == [
        ("src/app.py", StatusKind.MODIFIED),
        ("notes.txt", StatusKind.UNVERSIONED),
    ]
    assert fake.argvs == [["status", "--show-updates"], ["status"]]


async def test_status_with_remote_information(service, fake_svn):
    fake = fake_svn(
        "       *       965   docs/index.md\n"
        "M              965   docs/guide.md\n"
        "Status against revision:    981"
    )
    response = await service.get_status("docs", show_all=True)
    assert [(s.path, s.status) for s in response.data] == [
        ("docs/index.md", StatusKind.NONE),
        ("docs/guide.md", StatusKind.MODIFIED),
    ]
    assert fake.argvs == [["status", "--show-updates", "docs"]]


async def test_remote_status_columns_without_summary(service, fake_svn):
    fake_svn("       *       965   wc/foo.c")
    response = await service.get_status(show_all=True)
    assert [s.path for s in response.data] == ["wc/foo.c"]


async def test_local_status_failure_is_not_retried(service, fake_svn):
    fake = fake_svn(command_failure(NOT_A_WORKING_COPY))
    with pytest.raises(ClassifiedSvnError):
        await service.get_status()
    assert len(fake.commands) == 1


async def test_get_log(service, fake_svn):
    fake = fake_svn(LOG_OUTPUT)
    response = await service.get_log("trunk", limit=5)
    assert [entry.message for entry in response.data] == ["Fix the login form"]
    assert fake.argvs == [["log", "--limit", "5", "trunk"]]


async def test_get_diff(service, fake_svn):
    fake_svn("Index: a.txt\n===\n-old\n+new\r\n")
    response = await service.get_diff("a.txt", "3")
    assert response.data == "Index: a.txt\n===\n-old\n+new"


async def test_checkout_rejects_local_paths_as_url(service, fake_svn):
    fake = fake_svn()
    with pytest.raises(InvalidInputError, match="Invalid SVN URL"):
        await service.checkout("C:\\repo")
    assert fake.commands == []


async def test_checkout(service, fake_svn):
    fake = fake_svn("Checked out revision 3.")
    response = await service.checkout("svn://host/repo/trunk", "wc\\trunk")
    assert response.data == "Checked out revision 3."
    assert fake.argvs == [["checkout", "svn://host/repo/trunk", "wc/trunk"]]


async def test_add_several_files(service, fake_svn):
    fake = fake_svn("A         a.txt\nA         b.txt")
    await service.add(["a.txt", "docs\\b.txt"], AddOptions(parents=True))
    assert fake.argvs == [["add", "--parents", "a.txt", "docs/b.txt"]]


async def test_add_requires_files(service, fake_svn):
    fake_svn()
    with pytest.raises(InvalidInputError, match="No files specified to add"):
        await service.add([])


async def test_commit_requires_a_message(service, fake_svn):
    fake = fake_svn()
    with pytest.raises(InvalidInputError, match="Commit message is required"):
        await service.commit(CommitOptions())
    assert fake.commands == []


async def test_commit_paths_override_option_targets(service, fake_svn):
    fake = fake_svn("Committed revision 13.")
    options = CommitOptions(message="Fix", targets=["ignored.txt"])
    await service.commit(options, ["src\\app.py"])
    assert fake.argvs == [["commit", "--message", "Fix", "src/app.py"]]


async def test_commit_message_from_file(service, fake_svn):
    fake = fake_svn("Committed revision 14.")
    await service.commit(CommitOptions(file="msg.txt"))
    assert fake.argvs == [["commit", "--file", "msg.txt"]]


async def test_commit_rejects_message_and_file_together(service, fake_svn):
    fake = fake_svn()
    with pytest.raises(InvalidInputError, match="not both"):
        await service.commit(CommitOptions(message="Fix", file="msg.txt"))
    assert fake.commands == []


async def test_delete_accepts_urls(service, fake_svn):
    fake = fake_svn("Committed revision 15.")
    url = "svn://host/repo/branches/old"
    await service.delete(url, DeleteOptions(message="Remove old branch"))
    assert fake.argvs == [["delete", "--message", "Remove old branch", url]]


async def test_revert_and_cleanup(service, fake_svn):
    fake = fake_svn("Reverted 'a.txt'", "")
    await service.revert("a.txt")
    response = await service.cleanup()
    assert response.data == ""
    assert fake.argvs == [["revert", "a.txt"], ["cleanup"]]


async def test_update_locked_working_copy(service, fake_svn):
    fake_svn(command_failure("svn: E155004: Working copy '/wc' locked."))
    with pytest.raises(ClassifiedSvnError) as excinfo:
        await service.update()
    assert excinfo.value.classified.kind is ErrorKind.WORKING_COPY_LOCKED
    assert "svn_cleanup" in excinfo.value.suggestion


async def test_health_check_without_svn(service, fake_svn):
    fake_svn(command_failure("No such file or directory: 'svn'", exit_code=127))
    response = await service.health_check()
    assert not response.success
    assert response.error == "SVN is not available in the system PATH"
    assert response.data.svn_available is False
    assert "SVN_PATH" in response.suggestion


async def test_health_check_outside_a_working_copy(service, fake_svn):
    fake = fake_svn("1.14.2")
    response = await service.health_check()
    assert response.success
    assert response.data.version == "1.14.2"
    assert response.data.working_copy_valid is False
    assert response.data.repository_accessible is False
    assert len(fake.commands) == 1


async def test_health_check_in_a_working_copy(service, fake_svn, tmp_path):
    (tmp_path / ".svn").mkdir()
    fake_svn("1.14.2", "URL: svn://host/repo\nRevision: 3")
    response = await service.health_check()
    assert response.data.working_copy_valid is True
    assert response.data.repository_accessible is True


def test_is_working_copy_looks_at_parents(config, tmp_path):
    (tmp_path / ".svn").mkdir()
    nested = tmp_path / "src" / "pkg"
    nested.mkdir(parents=True)
    service = SvnService(config.model_copy(update={"working_directory": str(nested)}))
    assert service.is_working_copy()


async def test_diagnose_reports_remote_failures(service, fake_svn):
    fake_svn(
        "",
        command_failure(CONNECTION_REFUSED),
        command_failure(CONNECTION_REFUSED, command="svn log"),
    )
    response = await service.diagnose()
    report = response.data
    assert response.success
    assert report.status_local is True
    assert report.status_remote is False
    assert report.log_basic is False
    assert report.errors == [
        "remote status failed: Cannot connect to the SVN repository",
        "basic log failed: Cannot connect to the SVN repository",
    ]
    assert len(report.suggestions) == 2
    assert "network connectivity" in report.suggestions[-1]


async def test_diagnose_when_every_check_passes(service, fake_svn):
    fake = fake_svn("", "", LOG_OUTPUT)
    report = (await service.diagnose()).data
    assert (report.status_local, report.status_remote, report.log_basic) == (
        True,
        True,
        True,
    )
    assert report.errors == []
    assert report.suggestions == []
    assert fake.argvs == [
        ["status"],
        ["status", "--show-updates"],
        ["log", "--limit", "1"],
    ]


async def test_clear_credentials(service, fake_svn):
    fake = fake_svn("Credentials cache in '/home/dev/.subversion' contains 1 credential")
    response = await service.clear_credentials()
    assert response.success
    assert fake.commands[0].no_auth_cache
    assert fake.argvs == [["auth", "--remove", "*"]]


async def test_clear_credentials_falls_back_on_old_clients(service, fake_svn):
    fake = fake_svn(command_failure("svn: E205000: Unknown subcommand: 'auth'"), "")
    response = await service.clear_credentials()
    assert response.success
    assert response.data == "Credential cache cleared (using fallback method)"
    assert fake.argvs[1] == ["info"]
    assert fake.commands[1].no_auth_cache


async def test_clear_credentials_reports_failure(service, fake_svn):
    fake_svn(
        command_failure("svn: E205000: Unknown subcommand: 'auth'"),
        command_failure(NOT_A_WORKING_COPY),
    )
    response = await service.clear_credentials()
    assert not response.success
    assert response.error.startswith("Could not clear the credential cache: ")
