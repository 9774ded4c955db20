def test_can_import_all_protocols():
    # Import must succeed and expose the expected names
    import amdbridge.core.interfaces as I

    assert hasattr(I, "FileTransformProtocol")
    assert hasattr(I, "SourceRewriterProtocol")
    assert hasattr(I, "ModuleCacheProtocol")
    assert hasattr(I, "TemplateEngineProtocol")
    assert hasattr(I, "LoggerFactoryProtocol")
    assert hasattr(I, "LoggerLikeProtocol")


def test_concrete_types_satisfy_protocols():
    from amdbridge.core.interfaces import FileTransformProtocol, SourceRewriterProtocol, TemplateEngineProtocol
    from amdbridge.core.models import AmdOptions
    from amdbridge.processing.rewriter import IdentifierRewriter
    from amdbridge.rendering.template_engine import ScriptTemplateEngine
    from amdbridge.runtime.session import BuildSession

    assert isinstance(IdentifierRewriter(), SourceRewriterProtocol)
    assert isinstance(ScriptTemplateEngine(), TemplateEngineProtocol)
    assert isinstance(BuildSession(AmdOptions(loader="l.js", packages=("esri",))), FileTransformProtocol)


def test_package_surface():
    import amdbridge

    assert amdbridge.__version__
    rewriter = amdbridge.rewriter_factory(packages=["esri"])
    assert rewriter.rewrite("define();") == "enifed();"
    session = amdbridge.session_factory({"loaderURL": "l.js", "externalPackageNames": ["esri"]})
    assert session.options.packages == ("esri",)
