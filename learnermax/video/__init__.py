"""Video delivery: CloudFront signed URLs and cookies behind the enrollment gate."""
