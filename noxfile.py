import nox


@nox.session(python=["3.10", "3.11", "3.12", "3.13"])
def tests(session):
    # install
    session.install(".[tests]")

    # See what is installed
    import importlib.metadata

    installed_packages = sorted(
        (dist.metadata["Name"], dist.version)
        for dist in importlib.metadata.distributions()
    )
    for package_name, version in installed_packages:
        print(f"{package_name}=={version}")

    # Run tests
    session.run("pytest")
