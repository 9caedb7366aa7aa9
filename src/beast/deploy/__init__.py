"""
beast.deploy - Build, publish and deploy one service module to Kubernetes.

Submodules:
- beast.deploy.args - Command line parsing
- beast.deploy.cli - beast-deploy entry point
- beast.deploy.config - Settings from the CI environment
- beast.deploy.dockerfile - Dockerfile generation per language
- beast.deploy.env - Namespace validation and cluster context resolution
- beast.deploy.errors - Deployment errors
- beast.deploy.fields - Sizing from server-config.yml
- beast.deploy.kube - Kubernetes helpers using kubectl
- beast.deploy.lang - Language detection and server config location
- beast.deploy.log - Logging setup
- beast.deploy.manifest - Manifest selection and rendering
- beast.deploy.pipeline - The deployment pipeline
- beast.deploy.registry - Image build and publish to ECR
"""

__version__ = "0.2.0"
